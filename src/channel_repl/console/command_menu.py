import logging
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Dict, Mapping, Optional, Sequence

from prompt_toolkit.formatted_text import HTML

from channel_repl.console import rendering
from channel_repl.console.prompt_controller import (
    OperatorAbort,
    PromptController,
    PromptSuperseded,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Command:
    """A menu entry: full key, one-letter shortcut and its prompt label."""

    key: str
    shortcut: str
    label: str

    def matches(self, text: str) -> bool:
        return text in (self.key, self.shortcut)


COMMANDS: Dict[str, Command] = {
    command.key: command
    for command in (
        Command("sign", "s", "(<b>s</b>)ign"),
        Command("reject", "r", "(<b>r</b>)eject"),
        Command("update", "u", "(<b>u</b>)pdate"),
        Command("balances", "b", "(<b>b</b>)alances"),
        Command("poi", "p", "(<b>p</b>)oi"),
        Command("shutdown", "s", "(<b>s</b>)hutdown"),
    )
}


class Continuation(Enum):
    """What a handler asks its menu to do next."""

    REPEAT = "repeat"
    STOP = "stop"


Handler = Callable[[], Awaitable[Continuation]]


class CommandMenu:
    """Shows a set of commands, reads a choice and runs its handler."""

    def __init__(self, prompts: PromptController) -> None:
        self._prompts = prompts

    @staticmethod
    def build_prompt(commands: Sequence[Command]) -> HTML:
        return HTML(" ".join(command.label for command in commands) + ": ")

    @staticmethod
    def resolve(user_input: str, commands: Sequence[Command]) -> Optional[Command]:
        text = user_input.strip().lower()
        for command in commands:
            if command.matches(text):
                return command
        return None

    async def dispatch(self, handlers: Mapping[str, Handler]) -> None:
        """Run the menu until a handler returns ``Continuation.STOP``.

        Failures raised by a handler are reported and the menu is shown again;
        prompt supersession and operator abort propagate to the caller.
        """
        commands = [COMMANDS[key] for key in handlers]
        query = self.build_prompt(commands)

        while True:
            user_input = await self._prompts.ask(query)
            command = self.resolve(user_input, commands)
            if command is None:
                rendering.render_error(f"Unknown command: {user_input.strip().lower()}")
                continue

            logger.info(f"Dispatching command {command.key!r}")
            try:
                continuation = await handlers[command.key]()
            except (PromptSuperseded, OperatorAbort):
                raise
            except Exception as e:
                logger.exception(f"Command {command.key!r} failed")
                rendering.render_error("Error", str(e) or type(e).__name__)
                rendering.print_newline()
                continuation = Continuation.REPEAT

            if continuation is Continuation.STOP:
                return
