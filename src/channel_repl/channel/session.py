"""
Boundary of the channel session and the signing account.

The channel protocol itself (update validation, balances, proofs of inclusion,
on-chain close) lives behind these protocols; the console only drives it.
"""

import asyncio
from typing import (
    Any,
    Awaitable,
    Callable,
    Mapping,
    Optional,
    Protocol,
    Sequence,
    runtime_checkable,
)

from channel_repl.channel.events import ChannelEvent
from channel_repl.runtime_config import RuntimeConfig

# (tag, encoded transaction) -> signed transaction, or None to refuse
SignCallback = Callable[[str, str], Awaitable[Optional[str]]]

# encoded transaction -> signed transaction, or None to refuse
TxSignCallback = Callable[[str], Awaitable[Optional[str]]]


@runtime_checkable
class AccountProtocol(Protocol):
    """An account able to sign encoded transactions."""

    async def sign_transaction(self, tx: str) -> str: ...


@runtime_checkable
class ChannelSessionProtocol(Protocol):
    """An open (or opening) off-chain channel.

    Entering the context connects to the channel service; events are published
    on ``events`` for as long as the context is open.
    """

    events: asyncio.Queue[ChannelEvent]

    async def __aenter__(self) -> "ChannelSessionProtocol": ...

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None: ...

    async def update(
        self, from_address: str, to_address: str, amount: int, sign: TxSignCallback
    ) -> Any: ...

    async def shutdown(self, sign: TxSignCallback) -> str: ...

    async def balances(self, addresses: Sequence[str]) -> Mapping[str, Any]: ...

    async def poi(self, *, accounts: Sequence[str], contracts: Sequence[str]) -> str: ...


SessionFactory = Callable[[RuntimeConfig, SignCallback], ChannelSessionProtocol]
AccountFactory = Callable[[RuntimeConfig], AccountProtocol]
