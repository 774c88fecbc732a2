#!/usr/bin/env python3
"""
MCP Server for natural-language LND channel queries

Exposes a single tool, query_channels, which classifies a free-text
question about the node's channels, pulls channel data from LND's REST
API and answers with a text report plus structured data.

Usage:
    # Add to your MCP client settings:
    {
      "mcpServers": {
        "lnd": {
          "command": "python3",
          "args": ["/path/to/mcp-lnd-server.py"],
          "env": {
            "LND_REST_URL": "https://localhost:8080",
            "LND_MACAROON_PATH": "/path/to/readonly.macaroon",
            "LND_TLS_CERT_PATH": "/path/to/tls.cert"
          }
        }
      }
    }

A .env file in the working directory is read as well.
"""

import asyncio
import json
import logging
import os
import sys
from typing import Any, Dict, List, Optional

# Add tools directory to path for the helpers import
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))
from mcp_lnd_server_helpers import (
    QUERY_TOOL_NAME, normalize_response, query_tool_schema, validate_query_arguments,
)

from lnd_query.config import load_config
from lnd_query.lnd_client import LndRestClient
from lnd_query.query_processor import ChannelQueryProcessor

# MCP SDK imports
try:
    from mcp.server import Server
    from mcp.server.stdio import stdio_server
    from mcp.types import Tool, TextContent
except ImportError:
    print("MCP SDK not installed. Run: pip install mcp")
    raise

# MCP speaks over stdout, so logs go to stderr
logging.basicConfig(level=logging.INFO, stream=sys.stderr)
logger = logging.getLogger("mcp-lnd")


# =============================================================================
# MCP Server
# =============================================================================

server = Server("lnd-channel-query")

# Set in main()
processor: Optional[ChannelQueryProcessor] = None


@server.list_tools()
async def list_tools() -> List[Tool]:
    """List available tools."""
    return [
        Tool(
            name=QUERY_TOOL_NAME,
            description="Answer natural-language questions about this node's Lightning channels: "
                        "channel list, channel health, liquidity distribution, or unhealthy channels. "
                        "Returns a human-readable summary plus structured channel data.",
            inputSchema=query_tool_schema()
        ),
    ]


async def handle_query_channels(args: Dict) -> Dict:
    error = validate_query_arguments(args)
    if error:
        return {"error": error}
    if processor is None:
        return {"error": "LND connection is not configured"}
    return await processor.run_query(args["query"])


TOOL_HANDLERS = {
    QUERY_TOOL_NAME: handle_query_channels,
}


@server.call_tool()
async def call_tool(name: str, arguments: Dict) -> List[TextContent]:
    """Handle tool calls via registry dispatch."""
    try:
        handler = TOOL_HANDLERS.get(name)
        if handler is None:
            result: Any = {"error": f"Unknown tool: {name}"}
        else:
            result = await handler(arguments)
        return [TextContent(type="text", text=json.dumps(normalize_response(result), indent=2))]

    except Exception as e:
        logger.exception(f"Error in tool {name}")
        error_msg = str(e) or f"{type(e).__name__} in {name}"
        return [TextContent(type="text", text=json.dumps({"ok": False, "error": error_msg}))]


# =============================================================================
# Main
# =============================================================================

async def main():
    """Run the MCP server."""
    global processor

    try:
        config = load_config()
        logging.getLogger().setLevel(config.log_level)
        client = LndRestClient.from_config(config)
    except (ValueError, OSError) as e:
        logger.error(f"Failed to load LND configuration: {e}")
        sys.exit(1)

    processor = ChannelQueryProcessor(client, config.health_criteria)

    try:
        info = await client.get_info()
        logger.info(f"Connected to node {info.get('alias', 'unknown')} "
                    f"({info.get('num_active_channels', 0)} active channels)")
    except Exception as e:
        # Queries will report the error themselves
        logger.warning(f"LND not reachable at startup: {e}")

    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())

    await client.close()


if __name__ == "__main__":
    asyncio.run(main())
