import logging
from typing import Dict, Optional

from prompt_toolkit.formatted_text import HTML

from channel_repl.channel.decoder import format_tx
from channel_repl.channel.session import ChannelSessionProtocol
from channel_repl.console import rendering
from channel_repl.console.address_collector import (
    AddressCollector,
    partition_addresses,
)
from channel_repl.console.command_menu import CommandMenu, Continuation, Handler
from channel_repl.console.prompt_controller import PromptController, PromptSuperseded
from channel_repl.console.signing import SigningCoordinator

logger = logging.getLogger(__name__)


class AmountError(ValueError):
    """Raised when an entered amount is not a positive integer."""


def parse_amount(text: str) -> int:
    try:
        amount = int(text.strip())
    except ValueError:
        amount = 0
    if amount <= 0:
        raise AmountError("amount must be a positive integer")
    return amount


class CommandLoop:
    """Interactive control of an open channel: update, shutdown, balances, poi."""

    def __init__(
        self,
        session: ChannelSessionProtocol,
        signer: SigningCoordinator,
        prompts: PromptController,
        menu: Optional[CommandMenu] = None,
        collector: Optional[AddressCollector] = None,
    ) -> None:
        self.session = session
        self._signer = signer
        self._prompts = prompts
        self._menu = menu or CommandMenu(prompts)
        self._collector = collector or AddressCollector(prompts)

    def handlers(self) -> Dict[str, Handler]:
        return {
            "update": self.update,
            "shutdown": self.shutdown,
            "balances": self.balances,
            "poi": self.poi,
        }

    async def run(self) -> None:
        """Show the channel menu until shutdown, or until a newer prompt takes over."""
        logger.info("Entering command loop")
        try:
            await self._menu.dispatch(self.handlers())
        except PromptSuperseded:
            logger.info("Command loop prompt superseded")
            return
        logger.info("Command loop finished")

    async def _ask_amount(self) -> int:
        while True:
            answer = await self._prompts.ask(HTML("<b>amount:</b> "))
            try:
                return parse_amount(answer)
            except AmountError as e:
                rendering.render_error(str(e))

    async def update(self) -> Continuation:
        from_address = await self._prompts.ask(HTML("<b>from:</b> "), False)
        to_address = await self._prompts.ask(HTML("<b>to:</b> "), False)
        amount = await self._ask_amount()

        result = await self.session.update(
            from_address.strip(),
            to_address.strip(),
            amount,
            self._signer.callback("update"),
        )
        rendering.render_detail(rendering.format_result(result))
        rendering.print_newline()
        return Continuation.REPEAT

    async def shutdown(self) -> Continuation:
        tx = await self.session.shutdown(self._signer.callback("shutdown"))
        rendering.console.print("[bold green]onchain transaction[/bold green]")
        rendering.render_detail(format_tx(tx))
        rendering.print_newline()
        return Continuation.STOP

    async def balances(self) -> Continuation:
        rendering.render_heading(
            "Addresses to fetch balances from", "(hit enter to stop)"
        )
        addresses = await self._collector.collect()
        result = await self.session.balances(addresses)
        rendering.render_detail(rendering.format_result(result))
        return Continuation.REPEAT

    async def poi(self) -> Continuation:
        rendering.render_heading("Addresses to include", "(hit enter to stop)")
        partition = partition_addresses(await self._collector.collect())
        result = await self.session.poi(
            accounts=partition.accounts, contracts=partition.contracts
        )
        rendering.render_detail(rendering.format_result(result))
        return Continuation.REPEAT
