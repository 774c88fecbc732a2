"""
Channel data model for the query pipeline.

A Channel is rebuilt from the node snapshot on every query. Enrichment
sets remote_alias in place before analytics runs; nothing is persisted.

LND's REST API encodes int64 fields as strings, so from_dict() coerces
every numeric field and falls back to 0 for garbage.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


UNKNOWN_ALIAS = "Unknown"

DEFAULT_MIN_LOCAL_RATIO = 0.1
DEFAULT_MAX_LOCAL_RATIO = 0.9


def _coerce_int(value: Any) -> int:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        return int(value)
    if isinstance(value, str):
        try:
            return int(float(value))
        except ValueError:
            return 0
    return 0


# =============================================================================
# DATA CLASSES
# =============================================================================

@dataclass
class Channel:
    """
    One payment channel to a remote peer.

    Attributes:
        capacity: Total channel size in sats
        local_balance: Sats on our side
        remote_balance: Sats on the peer's side
        active: Whether the channel currently carries traffic
        remote_pubkey: Peer node public key
        remote_alias: Peer alias, resolved lazily
        channel_point: Funding outpoint, carried through untouched
    """
    capacity: int
    local_balance: int
    remote_balance: int
    active: bool
    remote_pubkey: str
    remote_alias: Optional[str] = None
    channel_point: Optional[str] = None

    @property
    def local_ratio(self) -> Optional[float]:
        """local_balance / capacity, or None for a zero-capacity channel."""
        if self.capacity <= 0:
            return None
        return self.local_balance / self.capacity

    @property
    def display_name(self) -> str:
        """Alias if resolved, otherwise a truncated pubkey."""
        if self.remote_alias:
            return self.remote_alias
        return self.remote_pubkey[:10] + "..."

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        result = {
            'capacity': self.capacity,
            'local_balance': self.local_balance,
            'remote_balance': self.remote_balance,
            'active': self.active,
            'remote_pubkey': self.remote_pubkey,
        }
        if self.remote_alias is not None:
            result['remote_alias'] = self.remote_alias
        if self.channel_point is not None:
            result['channel_point'] = self.channel_point
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Channel':
        """Create from an LND channel record (or an already-mapped dict)."""
        remote_pubkey = data.get('remote_pubkey') or ""
        if not isinstance(remote_pubkey, str) or not remote_pubkey:
            raise ValueError("Channel record is missing remote_pubkey")
        return cls(
            capacity=_coerce_int(data.get('capacity')),
            local_balance=_coerce_int(data.get('local_balance')),
            remote_balance=_coerce_int(data.get('remote_balance')),
            active=bool(data.get('active', False)),
            remote_pubkey=remote_pubkey,
            remote_alias=data.get('remote_alias'),
            channel_point=data.get('channel_point'),
        )


@dataclass(frozen=True)
class HealthCriteria:
    """
    Local-balance ratio band outside of which an active channel is unhealthy.

    Immutable; pass a different instance to use different thresholds.
    """
    min_local_ratio: float = DEFAULT_MIN_LOCAL_RATIO
    max_local_ratio: float = DEFAULT_MAX_LOCAL_RATIO

    def __post_init__(self):
        for name in ('min_local_ratio', 'max_local_ratio'):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must be between 0 and 1, got {value}")
        if self.min_local_ratio > self.max_local_ratio:
            raise ValueError(
                f"min_local_ratio ({self.min_local_ratio}) must not exceed "
                f"max_local_ratio ({self.max_local_ratio})"
            )

    @property
    def target_ratio(self) -> float:
        return (self.min_local_ratio + self.max_local_ratio) / 2

    def rebalance_amount(self, channel: Channel) -> int:
        """
        Sats to move to bring a channel to the middle of the healthy band.

        Positive means the channel needs to receive, negative means send.
        Zero-capacity channels need nothing.
        """
        if channel.capacity <= 0:
            return 0
        return round(self.target_ratio * channel.capacity - channel.local_balance)

    def to_dict(self) -> Dict[str, float]:
        return {
            'min_local_ratio': self.min_local_ratio,
            'max_local_ratio': self.max_local_ratio,
        }


@dataclass
class ChannelSummary:
    """Aggregate statistics over a channel set."""
    total_capacity: int = 0
    total_local_balance: int = 0
    total_remote_balance: int = 0
    active_channels: int = 0
    inactive_channels: int = 0
    average_capacity: float = 0
    healthy_channels: int = 0
    unhealthy_channels: int = 0
    most_imbalanced_channel: Optional[Channel] = None

    @property
    def total_channels(self) -> int:
        return self.healthy_channels + self.unhealthy_channels

    def to_dict(self) -> Dict[str, Any]:
        result = {
            'total_capacity': self.total_capacity,
            'total_local_balance': self.total_local_balance,
            'total_remote_balance': self.total_remote_balance,
            'active_channels': self.active_channels,
            'inactive_channels': self.inactive_channels,
            'average_capacity': self.average_capacity,
            'healthy_channels': self.healthy_channels,
            'unhealthy_channels': self.unhealthy_channels,
        }
        if self.most_imbalanced_channel is not None:
            result['most_imbalanced_channel'] = self.most_imbalanced_channel.to_dict()
        return result


@dataclass
class ChannelQueryResult:
    """Enriched channels plus their summary, as handed to the formatters."""
    channels: List[Channel]
    summary: ChannelSummary
    criteria: HealthCriteria = field(default_factory=HealthCriteria)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'channels': [c.to_dict() for c in self.channels],
            'summary': self.summary.to_dict(),
            'criteria': self.criteria.to_dict(),
        }
