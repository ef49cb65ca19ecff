"""Channel session boundary: events, protocols and transaction decoding."""

from .decoder import TxDecodeError, decode_tx, format_tx
from .events import (
    ChannelEvent,
    ChannelStatus,
    OnChainTxEvent,
    StateChangedEvent,
    StatusChangedEvent,
)
from .session import (
    AccountFactory,
    AccountProtocol,
    ChannelSessionProtocol,
    SessionFactory,
    SignCallback,
    TxSignCallback,
)

__all__ = [
    "AccountFactory",
    "AccountProtocol",
    "ChannelEvent",
    "ChannelSessionProtocol",
    "ChannelStatus",
    "OnChainTxEvent",
    "SessionFactory",
    "SignCallback",
    "StateChangedEvent",
    "StatusChangedEvent",
    "TxDecodeError",
    "TxSignCallback",
    "decode_tx",
    "format_tx",
]
