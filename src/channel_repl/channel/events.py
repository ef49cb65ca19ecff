"""
Events emitted by a channel session.

The session publishes these on its ``events`` queue in the order it observes
them; the console consumes them with exhaustive matching.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Union


class ChannelStatus(str, Enum):
    """Status values reported by the channel service."""

    connected = "connected"
    accepted = "accepted"
    half_signed = "halfSigned"
    signed = "signed"
    open = "open"
    closing = "closing"
    closed = "closed"
    died = "died"
    disconnected = "disconnected"


TERMINAL_STATUSES = frozenset(
    {ChannelStatus.disconnected.value, ChannelStatus.died.value}
)


@dataclass(frozen=True)
class OnChainTxEvent:
    """An on-chain transaction related to the channel was observed."""

    tx: str


@dataclass(frozen=True)
class StateChangedEvent:
    """The off-chain state of the channel changed."""

    state: str


@dataclass(frozen=True)
class StatusChangedEvent:
    """The channel moved to a new status.

    ``status`` is kept as the raw string so that values unknown to
    :class:`ChannelStatus` still flow through.
    """

    status: str


# Union type for all channel events
ChannelEvent = Union[OnChainTxEvent, StateChangedEvent, StatusChangedEvent]
