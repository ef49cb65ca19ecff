import logging
from typing import Optional

from prompt_toolkit.application import run_in_terminal

from channel_repl.channel.decoder import format_tx
from channel_repl.channel.session import AccountProtocol, TxSignCallback
from channel_repl.console import rendering
from channel_repl.console.command_menu import CommandMenu, Continuation
from channel_repl.console.prompt_controller import PromptController, PromptSuperseded

logger = logging.getLogger(__name__)


class SigningCoordinator:
    """Asks the operator to sign or reject each transaction the channel needs."""

    def __init__(
        self,
        account: AccountProtocol,
        prompts: PromptController,
        menu: Optional[CommandMenu] = None,
    ) -> None:
        self._account = account
        self._prompts = prompts
        self._menu = menu or CommandMenu(prompts)

    async def present(self, tag: str, tx: str) -> Optional[str]:
        """Show ``tx`` and resolve to the signed transaction, or None if rejected."""
        interrupting = self._prompts.active

        def show() -> None:
            if interrupting:
                rendering.print_newline()
            rendering.console.print(f"[bold green]{tag}[/bold green]")
            rendering.render_detail(format_tx(tx))
            rendering.render_detail(tx)
            rendering.print_newline()

        await run_in_terminal(show)

        signed: Optional[str] = None

        async def sign() -> Continuation:
            nonlocal signed
            signed = await self._account.sign_transaction(tx)
            return Continuation.STOP

        async def reject() -> Continuation:
            return Continuation.STOP

        logger.info(f"Signing request {tag!r} presented")
        try:
            await self._menu.dispatch({"sign": sign, "reject": reject})
        except PromptSuperseded:
            logger.warning(f"Signing request {tag!r} superseded, treating as rejected")
            return None

        logger.info(f"Signing request {tag!r} {'signed' if signed else 'rejected'}")
        return signed

    def callback(self, tag: str) -> TxSignCallback:
        """Return a per-operation signing callback bound to ``tag``."""

        async def sign(tx: str) -> Optional[str]:
            return await self.present(tag, tx)

        return sign
