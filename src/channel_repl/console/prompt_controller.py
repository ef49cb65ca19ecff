import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

from prompt_toolkit.formatted_text import AnyFormattedText
from prompt_toolkit.history import FileHistory
from prompt_toolkit.shortcuts import PromptSession

from channel_repl.console import rendering
from channel_repl.runtime_config import get_data_dir

logger = logging.getLogger(__name__)


class PromptSuperseded(Exception):
    """Raised to the caller of a prompt that a newer prompt replaced."""


class OperatorAbort(Exception):
    """Raised when the operator closes standard input (Ctrl-D)."""


@dataclass
class PendingPrompt:
    """The single outstanding request for operator input."""

    query: AnyFormattedText
    task: "asyncio.Task[str]"
    superseded: bool = False


class PromptController:
    """Owns the one live terminal prompt.

    Asking while another prompt is outstanding cancels the older one first:
    its caller gets :class:`PromptSuperseded` instead of an answer, so a line
    typed by the operator is only ever consumed once. The newer prompt starts
    reading only after the older one has released the terminal.
    """

    _pending: Optional[PendingPrompt]
    _unwinding: Optional["asyncio.Task[str]"]

    def __init__(self, prompt_session: Optional[PromptSession[str]] = None) -> None:
        self._prompt_session = prompt_session
        self._pending = None
        self._unwinding = None

    @property
    def prompt_session(self) -> PromptSession[str]:
        if self._prompt_session is None:
            # Store prompt history under the XDG data directory
            history_dir = get_data_dir()
            history_dir.mkdir(parents=True, exist_ok=True)
            self._prompt_session = PromptSession(
                history=FileHistory(str(history_dir / "prompt_history")),
            )
        return self._prompt_session

    @property
    def active(self) -> bool:
        return self._pending is not None and not self._pending.task.done()

    def cancel(self) -> bool:
        """Cancel the outstanding prompt, if any. Returns True if one was live."""
        pending = self._pending
        self._pending = None
        if pending is None or pending.task.done():
            return False
        pending.superseded = True
        pending.task.cancel()
        self._unwinding = pending.task
        return True

    async def _read(
        self, query: AnyFormattedText, previous: Optional["asyncio.Task[str]"]
    ) -> str:
        if previous is not None:
            # A cancelled prompt still owns the terminal until its application exits
            await asyncio.gather(previous, return_exceptions=True)
        return await self.prompt_session.prompt_async(query)

    async def ask(self, query: AnyFormattedText, trailing_newline: bool = True) -> str:
        """Prompt the operator and wait, without timeout, for one line of input."""
        if self.cancel():
            logger.debug("Superseded outstanding prompt")

        previous, self._unwinding = self._unwinding, None
        if previous is not None and previous.done():
            previous = None

        pending = PendingPrompt(
            query=query,
            task=asyncio.create_task(self._read(query, previous)),
        )
        self._pending = pending
        try:
            answer = await pending.task
        except asyncio.CancelledError:
            if pending.superseded:
                raise PromptSuperseded() from None
            pending.task.cancel()
            self._unwinding = pending.task
            raise
        except EOFError as e:
            raise OperatorAbort() from e
        finally:
            if self._pending is pending:
                self._pending = None

        if trailing_newline:
            rendering.print_newline()
        return answer
