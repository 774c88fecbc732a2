"""
Natural-language reports for channel query results.

One renderer per intent, each a pure function of a ChannelQueryResult.
Output is deterministic: every ordering is a stable sort over the input
order, so equal keys keep the order the node returned them in.

Thresholds for "imbalanced" come from result.criteria, the same
HealthCriteria the summary counts were computed with.
"""

from typing import List

from .channel_analytics import (
    imbalance, is_depleted_local, is_depleted_remote, is_imbalanced,
)
from .channels import Channel, ChannelQueryResult
from .intent_classifier import IntentType


SATS_PER_BTC = 100_000_000

TOP_CHANNELS_LIMIT = 5
LIQUIDITY_RANK_LIMIT = 3

UNKNOWN_QUERY_MESSAGE = (
    "I didn't understand \"{query}\". Try asking about your channel list, "
    "health, liquidity, or unhealthy channels."
)

ADVICE_INACTIVE = "- For inactive channels: Try reconnecting to the peers or check if they are online\n"
ADVICE_DEPLETED_LOCAL = "- For channels with low local balance: Consider receiving more inbound liquidity\n"
ADVICE_DEPLETED_REMOTE = "- For channels with high local balance: Try routing payments through these channels\n"


# =============================================================================
# HELPERS
# =============================================================================

def format_satoshis(sats: int) -> str:
    """1000000 -> '0.01000000 BTC (1,000,000 sats)'."""
    return f"{sats / SATS_PER_BTC:.8f} BTC ({sats:,} sats)"


def percent(part: float, whole: float) -> int:
    """Whole percentage, rounding half up; 0 when whole is 0."""
    if whole <= 0:
        return 0
    return int(part * 100 / whole + 0.5)


def _local_split(channel: Channel) -> str:
    local_pct = percent(channel.local_balance, channel.capacity)
    return f"{local_pct}% local / {100 - local_pct}% remote"


def _ranked_by_balance(channels: List[Channel], most_imbalanced: bool) -> List[Channel]:
    candidates = [c for c in channels if c.active and c.local_ratio is not None]
    return sorted(candidates, key=imbalance, reverse=most_imbalanced)[:LIQUIDITY_RANK_LIMIT]


# =============================================================================
# RENDERERS
# =============================================================================

def format_channel_list(data: ChannelQueryResult) -> str:
    channels, summary = data.channels, data.summary
    if not channels:
        return "Your node doesn't have any channels at the moment."

    response = (
        f"Your node has {len(channels)} channels with a total capacity of "
        f"{format_satoshis(summary.total_capacity)}. "
        f"{summary.active_channels} channels are active and "
        f"{summary.inactive_channels} are inactive.\n\n"
    )

    top_channels = sorted(channels, key=lambda c: c.capacity, reverse=True)[:TOP_CHANNELS_LIMIT]
    response += "Your largest channels:\n"
    for index, channel in enumerate(top_channels, 1):
        status = "active" if channel.active else "inactive"
        response += f"{index}. {channel.display_name}: {format_satoshis(channel.capacity)} ({status})\n"
    return response


def format_channel_health(data: ChannelQueryResult) -> str:
    channels, summary = data.channels, data.summary
    if not channels:
        return "Your node doesn't have any channels to check health for."

    response = (
        f"Channel Health Summary: {summary.healthy_channels} healthy, "
        f"{summary.unhealthy_channels} need attention.\n\n"
    )

    inactive = [c for c in channels if not c.active]
    if inactive:
        response += f"You have {len(inactive)} inactive channels that need attention:\n"
        for index, channel in enumerate(inactive, 1):
            response += f"{index}. {channel.display_name}: {format_satoshis(channel.capacity)}\n"
        response += "\n"

    imbalanced = [c for c in channels if is_imbalanced(c, data.criteria)]
    if imbalanced:
        response += f"You have {len(imbalanced)} severely imbalanced channels:\n"
        for index, channel in enumerate(imbalanced, 1):
            local_pct = percent(channel.local_balance, channel.capacity)
            response += f"{index}. {channel.display_name}: {local_pct}% local balance\n"

    if not inactive and not imbalanced:
        response += "All your channels are active and within the healthy balance range.\n"
    return response


def format_channel_liquidity(data: ChannelQueryResult) -> str:
    channels, summary = data.channels, data.summary
    if not channels:
        return "Your node doesn't have any channels to analyze liquidity."

    local_pct = percent(summary.total_local_balance, summary.total_capacity)
    remote_pct = percent(summary.total_remote_balance, summary.total_capacity)
    response = (
        f"Liquidity Distribution: {format_satoshis(summary.total_local_balance)} local "
        f"({local_pct}%), {format_satoshis(summary.total_remote_balance)} remote "
        f"({remote_pct}%).\n\n"
    )

    balanced = _ranked_by_balance(channels, most_imbalanced=False)
    if balanced:
        response += "Your most balanced channels:\n"
        for index, channel in enumerate(balanced, 1):
            response += f"{index}. {channel.display_name}: {_local_split(channel)}\n"
        response += "\n"

    imbalanced = _ranked_by_balance(channels, most_imbalanced=True)
    if imbalanced:
        response += "Your most imbalanced channels:\n"
        for index, channel in enumerate(imbalanced, 1):
            response += f"{index}. {channel.display_name}: {_local_split(channel)}\n"
    return response


def format_unhealthy_channels(data: ChannelQueryResult) -> str:
    channels, summary, criteria = data.channels, data.summary, data.criteria
    if not channels:
        return "Your node doesn't have any channels to check health for."

    if summary.unhealthy_channels == 0:
        return "Good news! All your channels are healthy."

    response = (
        f"Your node has {summary.unhealthy_channels} unhealthy channels out of "
        f"{summary.total_channels} total channels.\n\n"
    )

    inactive = [c for c in channels if not c.active]
    if inactive:
        response += f"Inactive Channels ({len(inactive)}):\n"
        for index, channel in enumerate(inactive, 1):
            response += f"{index}. {channel.display_name}: {format_satoshis(channel.capacity)} (inactive)\n"
        response += "\n"

    imbalanced = [c for c in channels if is_imbalanced(c, criteria)]
    if imbalanced:
        response += f"Imbalanced Channels ({len(imbalanced)}):\n"
        for index, channel in enumerate(imbalanced, 1):
            if is_depleted_local(channel, criteria):
                label = "depleted local balance"
            else:
                label = "depleted remote balance"
            amount = criteria.rebalance_amount(channel)
            direction = "receive" if amount > 0 else "send"
            response += (
                f"{index}. {channel.display_name}: {_local_split(channel)} ({label}), "
                f"{direction} ~{abs(amount):,} sats to rebalance\n"
            )

    response += "\nRecommendations:\n"
    if inactive:
        response += ADVICE_INACTIVE
    if any(is_depleted_local(c, criteria) for c in imbalanced):
        response += ADVICE_DEPLETED_LOCAL
    if any(is_depleted_remote(c, criteria) for c in imbalanced):
        response += ADVICE_DEPLETED_REMOTE
    return response


def format_unknown(query: str) -> str:
    return UNKNOWN_QUERY_MESSAGE.format(query=query)


def format_result(intent_type: IntentType, data: ChannelQueryResult) -> str:
    """
    Render data for a classified intent.

    Raises:
        ValueError: for UNKNOWN, which has no channel report
    """
    if intent_type is IntentType.CHANNEL_LIST:
        return format_channel_list(data)
    if intent_type is IntentType.CHANNEL_HEALTH:
        return format_channel_health(data)
    if intent_type is IntentType.CHANNEL_LIQUIDITY:
        return format_channel_liquidity(data)
    if intent_type is IntentType.CHANNEL_UNHEALTHY:
        return format_unhealthy_channels(data)
    raise ValueError(f"No channel report for intent {intent_type.value!r}")
