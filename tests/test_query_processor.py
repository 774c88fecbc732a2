"""
Tests for the query processor entry point.

Covers:
- End-to-end success for each intent against a mocked data source
- UNKNOWN intents never touch the data source
- Data-fetch failures become error results instead of exceptions
- Criteria injection
- Unhealthy intent narrows the structured channel list
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from lnd_query.channels import HealthCriteria
from lnd_query.lnd_client import LndRequestError
from lnd_query.query_processor import ChannelQueryProcessor, run_query


# =============================================================================
# FIXTURES
# =============================================================================

PEER_A = "02" + "aa" * 32
PEER_B = "03" + "bb" * 32


def raw_channel(pubkey, local, remote, capacity=1_000_000, active=True):
    return {
        "remote_pubkey": pubkey,
        "capacity": str(capacity),
        "local_balance": str(local),
        "remote_balance": str(remote),
        "active": active,
    }


def make_source(channels):
    source = MagicMock()
    source.list_channels = AsyncMock(return_value=channels)
    source.lookup_node_alias = AsyncMock(side_effect=lambda pk: {"alias": f"node-{pk[:4]}"})
    return source


@pytest.fixture
def single_channel_source():
    return make_source([raw_channel(PEER_A, 500_000, 500_000)])


@pytest.fixture
def mixed_source():
    return make_source([
        raw_channel(PEER_A, 500_000, 500_000),
        raw_channel(PEER_B, 50_000, 950_000),
        raw_channel(PEER_A, 250_000, 250_000, capacity=500_000, active=False),
    ])


# =============================================================================
# SUCCESS PATHS
# =============================================================================

class TestRunQuery:

    def test_list_my_channels(self, single_channel_source):
        result = asyncio.run(ChannelQueryProcessor(single_channel_source).run_query("list my channels"))

        assert result["type"] == "channel_list"
        assert "1" in result["text"]
        assert result["text"].startswith("Your node has 1 channels")
        assert result["data"]["summary"]["total_capacity"] == 1_000_000
        assert result["data"]["channels"][0]["remote_alias"] == "node-02aa"
        assert "error" not in result

    def test_health_query(self, mixed_source):
        result = asyncio.run(ChannelQueryProcessor(mixed_source).run_query("channel health"))
        assert result["type"] == "channel_health"
        assert result["text"].startswith("Channel Health Summary: 1 healthy, 2 need attention.")

    def test_liquidity_query(self, mixed_source):
        result = asyncio.run(ChannelQueryProcessor(mixed_source).run_query("channel liquidity"))
        assert result["type"] == "channel_liquidity"
        assert result["text"].startswith("Liquidity Distribution:")

    def test_unhealthy_query_narrows_channels(self, mixed_source):
        result = asyncio.run(ChannelQueryProcessor(mixed_source).run_query("unhealthy channels"))

        assert result["type"] == "channel_unhealthy"
        assert len(result["data"]["channels"]) == 2
        assert result["data"]["summary"]["healthy_channels"] == 1
        assert result["data"]["summary"]["unhealthy_channels"] == 2

    def test_alias_lookups_deduplicated(self, mixed_source):
        asyncio.run(ChannelQueryProcessor(mixed_source).run_query("list my channels"))
        assert mixed_source.lookup_node_alias.await_count == 2

    def test_empty_node(self):
        source = make_source([])
        result = asyncio.run(ChannelQueryProcessor(source).run_query("show me all my channels"))
        assert result["type"] == "channel_list"
        assert result["text"] == "Your node doesn't have any channels at the moment."
        assert result["data"]["channels"] == []

    def test_custom_criteria(self, single_channel_source):
        strict = HealthCriteria(min_local_ratio=0.6, max_local_ratio=0.9)
        result = asyncio.run(
            ChannelQueryProcessor(single_channel_source, strict).run_query("channel health")
        )
        assert result["data"]["summary"]["unhealthy_channels"] == 1
        assert result["data"]["criteria"] == {"min_local_ratio": 0.6, "max_local_ratio": 0.9}

    def test_module_level_run_query(self, single_channel_source):
        result = asyncio.run(run_query(single_channel_source, "list my channels"))
        assert result["type"] == "channel_list"


# =============================================================================
# UNKNOWN AND FAILURE PATHS
# =============================================================================

class TestUnknownAndErrors:

    def test_unknown_skips_data_source(self, single_channel_source):
        result = asyncio.run(
            ChannelQueryProcessor(single_channel_source).run_query("what is the meaning of life")
        )
        assert result["type"] == "unknown"
        assert result["data"] == {}
        assert "what is the meaning of life" in result["text"]
        single_channel_source.list_channels.assert_not_awaited()
        single_channel_source.lookup_node_alias.assert_not_awaited()

    def test_fetch_failure_is_error_result(self):
        source = make_source([])
        source.list_channels = AsyncMock(side_effect=LndRequestError("permission denied"))
        log = MagicMock()

        result = asyncio.run(ChannelQueryProcessor(source, log=log).run_query("list my channels"))

        assert result["type"] == "error"
        assert result["text"] == "Error processing your query: permission denied"
        assert result["error"] == {"message": "permission denied"}
        assert result["intent"] == "channel_list"
        assert result["query"] == "list my channels"
        assert result["data"] == {}
        log.error.assert_called_once()

    def test_exception_without_message(self):
        source = make_source([])
        source.list_channels = AsyncMock(side_effect=TimeoutError())
        result = asyncio.run(ChannelQueryProcessor(source).run_query("channel liquidity"))
        assert result["type"] == "error"
        assert result["error"]["message"] == "TimeoutError"

    def test_alias_failures_do_not_fail_query(self):
        source = make_source([raw_channel(PEER_A, 500_000, 500_000)])
        source.lookup_node_alias = AsyncMock(side_effect=LndRequestError("node not found"))
        result = asyncio.run(ChannelQueryProcessor(source).run_query("list my channels"))
        assert result["type"] == "channel_list"
        assert "1. Unknown:" in result["text"]

    def test_non_string_query(self, single_channel_source):
        result = asyncio.run(ChannelQueryProcessor(single_channel_source).run_query(None))
        assert result["type"] == "unknown"
        single_channel_source.list_channels.assert_not_awaited()
