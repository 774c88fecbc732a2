"""
Tests for intent classification.

Covers:
- Each intent's phrasing
- Precedence when a query matches more than one group
- Case insensitivity
- Degradation to unknown on bad input
"""

import pytest

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from lnd_query.intent_classifier import (
    Intent, IntentType, classify_intent, parse_intent
)


# =============================================================================
# INTENT PHRASING
# =============================================================================

class TestClassifyIntent:
    """Single-intent queries."""

    @pytest.mark.parametrize("query", [
        "show me all my channels",
        "list my channels",
        "what channels do I have?",
        "give me the channel list",
    ])
    def test_channel_list(self, query):
        assert classify_intent(query) == IntentType.CHANNEL_LIST

    @pytest.mark.parametrize("query", [
        "what is my channel health",
        "channel status please",
        "show active channels",
        "any problematic channels?",
        "are there channel issues",
    ])
    def test_channel_health(self, query):
        assert classify_intent(query) == IntentType.CHANNEL_HEALTH

    @pytest.mark.parametrize("query", [
        "channel liquidity",
        "how is my channel balance",
        "imbalanced channels",
        "what's my local balance",
        "show liquidity distribution",
        "channel capacity",
    ])
    def test_channel_liquidity(self, query):
        assert classify_intent(query) == IntentType.CHANNEL_LIQUIDITY

    @pytest.mark.parametrize("query", [
        "unhealthy channels",
        "which channels need attention",
        "channels needing attention",
        "broken channels",
        "inactive channels",
        "channels with issues",
    ])
    def test_channel_unhealthy(self, query):
        assert classify_intent(query) == IntentType.CHANNEL_UNHEALTHY

    def test_unknown(self):
        assert classify_intent("what is the meaning of life") == IntentType.UNKNOWN

    def test_empty_query_is_unknown(self):
        assert classify_intent("") == IntentType.UNKNOWN


# =============================================================================
# PRECEDENCE
# =============================================================================

class TestPrecedence:
    """Overlapping phrasing resolves to the most specific intent."""

    def test_unhealthy_beats_list(self):
        assert classify_intent("list unhealthy channels") == IntentType.CHANNEL_UNHEALTHY
        assert classify_intent("show all unhealthy channels") == IntentType.CHANNEL_UNHEALTHY

    def test_inactive_is_unhealthy_not_health(self):
        assert classify_intent("show me inactive channels") == IntentType.CHANNEL_UNHEALTHY

    def test_list_beats_liquidity(self):
        assert classify_intent("show my channels and their channel balance") == IntentType.CHANNEL_LIST

    def test_health_beats_liquidity(self):
        assert classify_intent("channel health and channel liquidity") == IntentType.CHANNEL_HEALTH

    def test_case_insensitive(self):
        assert classify_intent("SHOW ME ALL MY CHANNELS") == IntentType.CHANNEL_LIST
        assert classify_intent("Unhealthy Channels") == IntentType.CHANNEL_UNHEALTHY


# =============================================================================
# PARSE INTENT
# =============================================================================

class TestParseIntent:
    """Intent objects and failure handling."""

    def test_query_is_retained(self):
        intent = parse_intent("channel liquidity")
        assert intent == Intent(type=IntentType.CHANNEL_LIQUIDITY, query="channel liquidity")
        assert intent.error is None

    def test_non_string_degrades_to_unknown(self):
        intent = parse_intent(None)
        assert intent.type == IntentType.UNKNOWN
        assert intent.error

    def test_to_dict_serializes_type_value(self):
        data = parse_intent("broken channels").to_dict()
        assert data == {"type": "channel_unhealthy", "query": "broken channels"}
