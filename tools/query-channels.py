#!/usr/bin/env python3
"""
Run one natural-language channel query against LND and print the answer.

Usage:
    ./query-channels.py "show me all my channels"
    ./query-channels.py --json "which channels are unhealthy?"

Connection settings come from LND_* environment variables or a .env file.
"""

import argparse
import asyncio
import json
import logging
import sys

from lnd_query.config import load_config
from lnd_query.lnd_client import LndRestClient
from lnd_query.query_processor import ChannelQueryProcessor

logger = logging.getLogger("query-channels")


async def run(query: str, as_json: bool) -> int:
    config = load_config()
    client = LndRestClient.from_config(config)
    try:
        result = await ChannelQueryProcessor(client, config.health_criteria).run_query(query)
    finally:
        await client.close()

    if as_json:
        print(json.dumps(result, indent=2))
    else:
        print(result["text"])
    return 1 if result["type"] == "error" else 0


def main():
    parser = argparse.ArgumentParser(description="Ask a question about your LND channels")
    parser.add_argument("query", help="Natural language query, e.g. 'channel liquidity'")
    parser.add_argument("--json", action="store_true", help="Print the full result as JSON")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    try:
        sys.exit(asyncio.run(run(args.query, args.json)))
    except (ValueError, OSError) as e:
        logger.error(f"Configuration error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
