import asyncio
import logging
from typing import Callable, Optional

from prompt_toolkit.application import run_in_terminal

from channel_repl.channel.events import (
    TERMINAL_STATUSES,
    ChannelEvent,
    ChannelStatus,
    OnChainTxEvent,
    StateChangedEvent,
    StatusChangedEvent,
)
from channel_repl.channel.session import (
    AccountProtocol,
    ChannelSessionProtocol,
    SignCallback,
)
from channel_repl.console import rendering
from channel_repl.console.command_loop import CommandLoop
from channel_repl.console.prompt_controller import OperatorAbort, PromptController
from channel_repl.console.signing import SigningCoordinator

logger = logging.getLogger(__name__)

# Tag of the signing request sent when the other party proposed an update
UPDATE_ACK_TAG = "update_ack"

EXIT_OK = 0
EXIT_ABORTED = 130


class ChannelEventBridge:
    """Connects a channel session to the operator.

    Session events are rendered in the order they arrive; an ``open`` status
    hands the terminal to the :class:`CommandLoop` and a terminal status ends
    :meth:`run` with the process exit code.
    """

    session: ChannelSessionProtocol

    _loop_task: Optional["asyncio.Task[None]"]
    _exit: Optional["asyncio.Future[int]"]

    def __init__(
        self,
        account: AccountProtocol,
        session_factory: Callable[[SignCallback], ChannelSessionProtocol],
        prompts: Optional[PromptController] = None,
    ) -> None:
        self.prompts = prompts or PromptController()
        self.signer = SigningCoordinator(account, self.prompts)
        self.session = session_factory(self.sign)
        self._loop_task = None
        self._exit = None

    async def sign(self, tag: str, tx: str) -> Optional[str]:
        """Signing callback handed to the session for protocol-driven requests."""
        try:
            signed = await self.signer.present(tag, tx)
        except OperatorAbort:
            self._finish(EXIT_ABORTED)
            return None
        if tag == UPDATE_ACK_TAG:
            self.enter_command_loop()
        return signed

    def enter_command_loop(self) -> None:
        """Start the command loop unless one is already running or the session ended."""
        if self._exit is not None and self._exit.done():
            logger.debug("Session finished, not entering command loop")
            return
        if self._loop_task and not self._loop_task.done():
            logger.debug("Command loop already running")
            return
        loop = CommandLoop(self.session, self.signer, self.prompts)
        self._loop_task = asyncio.create_task(loop.run())
        self._loop_task.add_done_callback(self._on_loop_done)

    def _on_loop_done(self, task: "asyncio.Task[None]") -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is None:
            return
        if isinstance(exc, OperatorAbort):
            self._finish(EXIT_ABORTED)
            return
        logger.error("Command loop crashed", exc_info=exc)
        if self._exit is not None and not self._exit.done():
            self._exit.set_exception(exc)

    def _finish(self, code: int) -> None:
        if self._exit is not None and not self._exit.done():
            self._exit.set_result(code)

    async def handle_event(self, event: ChannelEvent) -> None:
        logger.debug(f"Channel event received: {event!r}")
        match event:
            case OnChainTxEvent(tx=tx):
                await run_in_terminal(
                    lambda: rendering.render_notice("onchain transaction", tx)
                )
            case StateChangedEvent(state=state):
                await run_in_terminal(
                    lambda: rendering.render_notice("state changed", state)
                )
            case StatusChangedEvent(status=status) if status == ChannelStatus.open:
                self.enter_command_loop()
            case StatusChangedEvent(status=status) if status in TERMINAL_STATUSES:
                self.prompts.cancel()
                await run_in_terminal(lambda: rendering.render_status(status))
                self._finish(EXIT_OK)
            case StatusChangedEvent(status=status):
                logger.info(f"Channel status changed to {status!r}")
            case _:
                logger.warning(f"Unhandled channel event: {event!r}")

    async def _event_stream_consumer(self) -> None:
        while True:
            event = await self.session.events.get()
            await self.handle_event(event)

    async def run(self) -> int:
        """Drive the session until it reaches a terminal status; return the exit code."""
        self._exit = asyncio.get_running_loop().create_future()
        async with self.session:
            consumer = asyncio.create_task(self._event_stream_consumer())
            consumer.add_done_callback(self._on_consumer_done)
            try:
                return await self._exit
            finally:
                self.prompts.cancel()
                for task in (consumer, self._loop_task):
                    if task is not None and not task.done():
                        task.cancel()
                await asyncio.gather(
                    *(t for t in (consumer, self._loop_task) if t is not None),
                    return_exceptions=True,
                )

    def _on_consumer_done(self, task: "asyncio.Task[None]") -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None and self._exit is not None and not self._exit.done():
            logger.error("Channel event consumer crashed", exc_info=exc)
            self._exit.set_exception(exc)
