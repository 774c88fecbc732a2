"""
Intent classification for free-text channel queries.

Pattern groups are evaluated in order and the first group with a match
wins. Queries routinely satisfy more than one loose pattern ("list
unhealthy channels" also looks like a list request), so the order below
is the precedence:

1. channel_unhealthy
2. channel_list
3. channel_health
4. channel_liquidity

Anything else is unknown. Classification never raises; a failure while
matching degrades to unknown with the error kept on the Intent.
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

logger = logging.getLogger("lnd-query.intent")


# =============================================================================
# ENUMS
# =============================================================================

class IntentType(str, Enum):
    """
    Query intents the pipeline can answer.

    Using str, Enum for JSON serialization compatibility.
    """
    CHANNEL_LIST = 'channel_list'
    CHANNEL_HEALTH = 'channel_health'
    CHANNEL_LIQUIDITY = 'channel_liquidity'
    CHANNEL_UNHEALTHY = 'channel_unhealthy'
    UNKNOWN = 'unknown'


# =============================================================================
# PATTERNS
# =============================================================================

def _compile(patterns: List[str]) -> List[re.Pattern]:
    return [re.compile(p, re.IGNORECASE) for p in patterns]


INTENT_PATTERNS: List[Tuple[IntentType, List[re.Pattern]]] = [
    (IntentType.CHANNEL_UNHEALTHY, _compile([
        r'\bunhealthy\b',
        r'channels? (that need|that needs|needing|requiring) attention',
        r'need(s|ing)? attention',
        r'broken channels?',
        r'\binactive channels?',
        r'channels? (with|having) (issues|problems)',
    ])),
    (IntentType.CHANNEL_LIST, _compile([
        r'(show|list) (me |my |all )*channels',
        r'what channels',
        r'channel list',
        r'all channels',
    ])),
    (IntentType.CHANNEL_HEALTH, _compile([
        r'channels? (status|health)',
        r'\b(inactive|active) channels',
        r'problematic channels?',
        r'channels? (issues|problems)',
    ])),
    (IntentType.CHANNEL_LIQUIDITY, _compile([
        r'channels? (balance|liquidity)',
        r'imbalanced channels?',
        r'(local|remote) balance',
        r'liquidity distribution',
        r'channels? capacity',
        r'\bliquidity\b',
    ])),
]


# =============================================================================
# DATA CLASSES
# =============================================================================

@dataclass
class Intent:
    """
    A classified query.

    Attributes:
        type: The classified IntentType
        query: Original query text, kept for diagnostics
        error: Message of a matching failure, if classification degraded
    """
    type: IntentType
    query: str
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        result = {'type': self.type.value, 'query': self.query}
        if self.error:
            result['error'] = self.error
        return result


# =============================================================================
# CLASSIFICATION
# =============================================================================

def _match(query: str) -> IntentType:
    for intent_type, patterns in INTENT_PATTERNS:
        if any(p.search(query) for p in patterns):
            return intent_type
    return IntentType.UNKNOWN


def parse_intent(query: str) -> Intent:
    """
    Classify a query into an Intent.

    Never raises. Non-string input or any matching failure yields an
    UNKNOWN intent carrying the error message.
    """
    try:
        intent_type = _match(query)
    except Exception as e:
        error_msg = str(e) or type(e).__name__
        logger.error(f"Failed to classify query {query!r}: {error_msg}")
        return Intent(type=IntentType.UNKNOWN, query=str(query), error=error_msg)

    logger.debug(f"Classified query {query!r} as {intent_type.value}")
    return Intent(type=intent_type, query=query)


def classify_intent(query: str) -> IntentType:
    """Shorthand for parse_intent(query).type."""
    return parse_intent(query).type
