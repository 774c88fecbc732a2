"""Natural-language channel queries against an LND node."""

from .channels import Channel, ChannelQueryResult, ChannelSummary, HealthCriteria
from .intent_classifier import Intent, IntentType, classify_intent, parse_intent
from .query_processor import ChannelQueryProcessor, run_query

__version__ = "0.1.0"

__all__ = [
    "Channel",
    "ChannelQueryProcessor",
    "ChannelQueryResult",
    "ChannelSummary",
    "HealthCriteria",
    "Intent",
    "IntentType",
    "classify_intent",
    "parse_intent",
    "run_query",
]
