"""
Resolve remote node aliases for a channel list.

One lookup per distinct remote pubkey, all issued concurrently and
awaited as a batch. A failed lookup only affects its own peer (alias
falls back to "Unknown"). If the batch itself blows up, the channels are
returned without aliases; aliases are cosmetic and must not hide the
channel data.
"""

import asyncio
import logging
import time
from typing import Any, Awaitable, Callable, Dict, List, Tuple

from .channels import UNKNOWN_ALIAS, Channel

logger = logging.getLogger("lnd-query.enricher")

AliasLookup = Callable[[str], Awaitable[Dict[str, Any]]]


def to_channels(raw_channels: Any) -> List[Channel]:
    """Map raw LND channel records to Channel objects; non-lists map to []."""
    if not raw_channels or not isinstance(raw_channels, list):
        return []
    return [c if isinstance(c, Channel) else Channel.from_dict(c) for c in raw_channels]


async def _resolve_aliases(pubkeys: List[str], lookup_alias: AliasLookup) -> Dict[str, str]:
    async def resolve(pubkey: str) -> Tuple[str, str]:
        try:
            info = await lookup_alias(pubkey)
            alias = info.get("alias") if isinstance(info, dict) else None
            return (pubkey, alias or UNKNOWN_ALIAS)
        except Exception as e:
            logger.debug(f"Could not fetch alias for node {pubkey[:8]}...: {e}")
            return (pubkey, UNKNOWN_ALIAS)

    tasks = [resolve(pubkey) for pubkey in pubkeys]
    results_list = await asyncio.gather(*tasks)
    return dict(results_list)


async def enrich_channels(raw_channels: Any, lookup_alias: AliasLookup) -> List[Channel]:
    """
    Build Channel objects and set remote_alias on each of them.

    Args:
        raw_channels: Channel records from the data source
        lookup_alias: async pubkey -> {"alias": ...} callable

    Returns:
        Channels in input order, aliases filled in where possible
    """
    channels = to_channels(raw_channels)
    if not channels:
        return []

    # dict keeps first-seen order
    pubkeys = list(dict.fromkeys(c.remote_pubkey for c in channels))
    start = time.monotonic()
    logger.debug(
        f"Fetching aliases for {len(pubkeys)} unique nodes across {len(channels)} channels"
    )

    try:
        aliases = await _resolve_aliases(pubkeys, lookup_alias)
    except Exception as e:
        logger.error(f"Error adding node aliases: {e}")
        return channels

    for channel in channels:
        channel.remote_alias = aliases.get(channel.remote_pubkey, UNKNOWN_ALIAS)

    duration_ms = round((time.monotonic() - start) * 1000)
    logger.info(
        f"Node alias retrieval completed in {duration_ms}ms "
        f"({len(pubkeys)} nodes, {len(channels)} channels)"
    )
    return channels
