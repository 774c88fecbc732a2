"""
Query processor: the single entry point for natural-language channel queries.

Per query:
    received -> classified -> data fetched -> summarized -> formatted
or, on any failure after classification, an "error" result. UNKNOWN
intents return right after classification without touching the node.

run_query() never raises. Callers always get a dict with "type",
"text" and "data"; error results also carry "error", "intent" and
"query".
"""

import logging
import time
from typing import Any, Dict, Optional

from .channel_analytics import summarize_channels, unhealthy_channels
from .channel_enricher import enrich_channels
from .channels import ChannelQueryResult, HealthCriteria
from .formatter import format_result, format_unknown
from .intent_classifier import Intent, IntentType, parse_intent

logger = logging.getLogger("lnd-query")

ERROR_TYPE = "error"


class ChannelQueryProcessor:
    """
    Runs classified channel queries against a channel data source.

    The data source needs two coroutines:
        list_channels() -> list of raw channel records
        lookup_node_alias(pubkey) -> {"alias": ...}
    """

    def __init__(self, source: Any, criteria: Optional[HealthCriteria] = None,
                 log: Any = None):
        """
        Args:
            source: Channel data source (e.g. LndRestClient)
            criteria: Health thresholds, defaults to HealthCriteria()
            log: Logger-like object, defaults to the module logger
        """
        self.source = source
        self.criteria = criteria or HealthCriteria()
        self.log = log or logger

    async def fetch(self) -> ChannelQueryResult:
        """Fetch, enrich and summarize the node's channels."""
        start = time.monotonic()
        raw_channels = await self.source.list_channels()
        channels = await enrich_channels(raw_channels, self.source.lookup_node_alias)
        fetch_ms = round((time.monotonic() - start) * 1000)
        self.log.info(f"Fetched {len(channels)} channels in {fetch_ms}ms")

        start = time.monotonic()
        summary = summarize_channels(channels, self.criteria)
        summarize_ms = round((time.monotonic() - start) * 1000)
        self.log.info(
            f"Summarized {len(channels)} channels in {summarize_ms}ms "
            f"({summary.healthy_channels} healthy, {summary.unhealthy_channels} unhealthy)"
        )
        return ChannelQueryResult(channels=channels, summary=summary, criteria=self.criteria)

    def _structured_data(self, intent: Intent, result: ChannelQueryResult) -> Dict[str, Any]:
        if intent.type is IntentType.CHANNEL_UNHEALTHY:
            # Only the unhealthy channels, summary still covers everything
            result = ChannelQueryResult(
                channels=unhealthy_channels(result.channels, self.criteria),
                summary=result.summary,
                criteria=self.criteria,
            )
        return result.to_dict()

    async def run_query(self, text: str) -> Dict[str, Any]:
        """Answer a natural-language query. Never raises."""
        intent = parse_intent(text)
        if intent.error:
            self.log.debug(f"Classification degraded to unknown: {intent.error}")

        if intent.type is IntentType.UNKNOWN:
            return {
                "type": IntentType.UNKNOWN.value,
                "text": format_unknown(intent.query),
                "data": {},
            }

        self.log.info(f"Processing {intent.type.value} query: {intent.query!r}")
        try:
            result = await self.fetch()
            return {
                "type": intent.type.value,
                "text": format_result(intent.type, result),
                "data": self._structured_data(intent, result),
            }
        except Exception as e:
            error_msg = str(e) or type(e).__name__
            self.log.error(
                f"Channel query failed (intent={intent.type.value}, query={intent.query!r}): {error_msg}"
            )
            return {
                "type": ERROR_TYPE,
                "text": f"Error processing your query: {error_msg}",
                "data": {},
                "error": {"message": error_msg},
                "intent": intent.type.value,
                "query": intent.query,
            }


async def run_query(source: Any, text: str,
                    criteria: Optional[HealthCriteria] = None) -> Dict[str, Any]:
    """One-shot convenience wrapper around ChannelQueryProcessor.run_query()."""
    return await ChannelQueryProcessor(source, criteria).run_query(text)
