import logging
from dataclasses import dataclass, field
from typing import List, Sequence

from prompt_toolkit.formatted_text import HTML

from channel_repl.console import rendering
from channel_repl.console.prompt_controller import PromptController

logger = logging.getLogger(__name__)

ACCOUNT_PREFIX = "ak_"
CONTRACT_PREFIX = "ct_"


class AddressValidationError(ValueError):
    """Raised when an entered address has no recognised prefix."""


def parse_address(text: str) -> str:
    address = text.strip()
    if not address.startswith((ACCOUNT_PREFIX, CONTRACT_PREFIX)):
        raise AddressValidationError(
            f"address must be prefixed with {ACCOUNT_PREFIX} or {CONTRACT_PREFIX}"
        )
    return address


@dataclass
class AddressPartition:
    accounts: List[str] = field(default_factory=list)
    contracts: List[str] = field(default_factory=list)


def partition_addresses(addresses: Sequence[str]) -> AddressPartition:
    """Split addresses into accounts and contracts, keeping their order."""
    partition = AddressPartition()
    for address in addresses:
        if address.startswith(ACCOUNT_PREFIX):
            partition.accounts.append(address)
        elif address.startswith(CONTRACT_PREFIX):
            partition.contracts.append(address)
    return partition


class AddressCollector:
    """Reads addresses one per line until the operator enters a blank line."""

    def __init__(self, prompts: PromptController) -> None:
        self._prompts = prompts

    async def collect(self) -> List[str]:
        addresses: List[str] = []
        while True:
            answer = await self._prompts.ask(
                HTML(f"<b>#{len(addresses) + 1}: </b>"), trailing_newline=False
            )
            if not answer.strip():
                logger.debug(f"Collected {len(addresses)} addresses")
                return addresses
            try:
                addresses.append(parse_address(answer))
            except AddressValidationError as e:
                rendering.render_error(str(e))
