"""
Health and liquidity analytics over an enriched channel set.

Everything here is pure and synchronous.

Health rule:
- inactive channels are always unhealthy
- active channels are unhealthy when local_balance / capacity falls
  outside [criteria.min_local_ratio, criteria.max_local_ratio]
- zero-capacity channels have no ratio and only fail on the active flag

Imbalance is |0.5 - local_ratio| and does not depend on the criteria.
"""

from typing import List, Optional

from .channels import Channel, ChannelSummary, HealthCriteria


BALANCED_RATIO = 0.5


def imbalance(channel: Channel) -> Optional[float]:
    """Distance of the local ratio from 0.5, None for zero capacity."""
    ratio = channel.local_ratio
    if ratio is None:
        return None
    return abs(BALANCED_RATIO - ratio)


def is_depleted_local(channel: Channel, criteria: HealthCriteria) -> bool:
    ratio = channel.local_ratio
    return ratio is not None and ratio < criteria.min_local_ratio


def is_depleted_remote(channel: Channel, criteria: HealthCriteria) -> bool:
    ratio = channel.local_ratio
    return ratio is not None and ratio > criteria.max_local_ratio


def is_imbalanced(channel: Channel, criteria: HealthCriteria) -> bool:
    """Active channel whose ratio sits outside the healthy band."""
    if not channel.active:
        return False
    return is_depleted_local(channel, criteria) or is_depleted_remote(channel, criteria)


def is_channel_healthy(channel: Channel, criteria: HealthCriteria) -> bool:
    if not channel.active:
        return False
    return not is_imbalanced(channel, criteria)


def find_most_imbalanced(channels: List[Channel]) -> Optional[Channel]:
    """
    Channel with the largest imbalance.

    Ties keep the first channel seen. Zero-capacity channels are skipped.
    """
    best: Optional[Channel] = None
    best_score = -1.0
    for channel in channels:
        score = imbalance(channel)
        if score is None:
            continue
        if score > best_score:
            best = channel
            best_score = score
    return best


def summarize_channels(channels: List[Channel],
                       criteria: Optional[HealthCriteria] = None) -> ChannelSummary:
    """
    Compute aggregate statistics and health counts.

    Args:
        channels: Enriched channels (may be empty)
        criteria: Health thresholds, defaults to HealthCriteria()

    Returns:
        ChannelSummary; all zeros for an empty set
    """
    if criteria is None:
        criteria = HealthCriteria()

    if not channels:
        return ChannelSummary()

    active = sum(1 for c in channels if c.active)
    unhealthy = sum(1 for c in channels if not is_channel_healthy(c, criteria))
    total_capacity = sum(c.capacity for c in channels)

    return ChannelSummary(
        total_capacity=total_capacity,
        total_local_balance=sum(c.local_balance for c in channels),
        total_remote_balance=sum(c.remote_balance for c in channels),
        active_channels=active,
        inactive_channels=len(channels) - active,
        average_capacity=total_capacity / len(channels),
        healthy_channels=len(channels) - unhealthy,
        unhealthy_channels=unhealthy,
        most_imbalanced_channel=find_most_imbalanced(channels),
    )


def unhealthy_channels(channels: List[Channel],
                       criteria: HealthCriteria) -> List[Channel]:
    return [c for c in channels if not is_channel_healthy(c, criteria)]
