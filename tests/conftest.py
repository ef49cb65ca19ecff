import asyncio
from typing import Any, Callable, List, Mapping, Optional, Sequence, Tuple

import pytest
from prompt_toolkit.formatted_text import AnyFormattedText, to_plain_text
from rich.console import Console

import channel_repl.console.rendering as rendering
from channel_repl.channel.events import ChannelEvent
from channel_repl.channel.session import SignCallback, TxSignCallback
from channel_repl.console.prompt_controller import PromptController

# Answer that makes the scripted prompt behave like Ctrl-D
EOF = object()


class ScriptedPromptSession:
    """Stands in for prompt_toolkit's PromptSession; answers come from a queue."""

    def __init__(self) -> None:
        self.answers: asyncio.Queue[Any] = asyncio.Queue()
        self.prompts: List[str] = []

    def feed(self, *answers: Any) -> None:
        for answer in answers:
            self.answers.put_nowait(answer)

    async def prompt_async(self, message: AnyFormattedText = None) -> str:
        self.prompts.append(to_plain_text(message))
        answer = await self.answers.get()
        if answer is EOF:
            raise EOFError()
        return str(answer)


class MockAccount:
    """Mock account for testing."""

    def __init__(self) -> None:
        self.signed: List[str] = []
        self.error: Optional[Exception] = None

    async def sign_transaction(self, tx: str) -> str:
        if self.error is not None:
            error, self.error = self.error, None
            raise error
        self.signed.append(tx)
        return f"signed:{tx}"


class MockSession:
    """Mock channel session for testing."""

    def __init__(self, sign: Optional[SignCallback] = None) -> None:
        self.sign = sign
        self.events: asyncio.Queue[ChannelEvent] = asyncio.Queue()
        self.calls: List[Tuple[Any, ...]] = []
        self.signatures: List[Optional[str]] = []
        self.entered = False
        self.exited = False
        self.error: Optional[Exception] = None

        self.update_result: Any = {"accepted": True, "round": 2}
        self.shutdown_tx = "tx_shutdown"
        self.balances_result: Mapping[str, Any] = {"ak_1": 10, "ct_2": 0}
        self.poi_result = "pi_proof"

    async def __aenter__(self) -> "MockSession":
        self.entered = True
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.exited = True

    def _fail_if_requested(self) -> None:
        if self.error is not None:
            error, self.error = self.error, None
            raise error

    async def update(
        self, from_address: str, to_address: str, amount: int, sign: TxSignCallback
    ) -> Any:
        self.calls.append(("update", from_address, to_address, amount))
        self._fail_if_requested()
        self.signatures.append(await sign("tx_update"))
        return self.update_result

    async def shutdown(self, sign: TxSignCallback) -> str:
        self.calls.append(("shutdown",))
        self._fail_if_requested()
        self.signatures.append(await sign("tx_close_mutual"))
        return self.shutdown_tx

    async def balances(self, addresses: Sequence[str]) -> Mapping[str, Any]:
        self.calls.append(("balances", list(addresses)))
        self._fail_if_requested()
        return self.balances_result

    async def poi(self, *, accounts: Sequence[str], contracts: Sequence[str]) -> str:
        self.calls.append(("poi", list(accounts), list(contracts)))
        self._fail_if_requested()
        return self.poi_result


async def wait_for_prompts(
    session: ScriptedPromptSession, count: int, timeout: float = 2.0
) -> None:
    """Wait until ``count`` prompts have been shown."""

    async def _poll() -> None:
        while len(session.prompts) < count:
            await asyncio.sleep(0.005)

    await asyncio.wait_for(_poll(), timeout)


async def settle() -> None:
    """Let every ready task run a few steps."""
    for _ in range(10):
        await asyncio.sleep(0)


@pytest.fixture(autouse=True)
def recorder(monkeypatch: pytest.MonkeyPatch) -> Console:
    # Redirect console output to a recorder
    console = Console(record=True, width=120)
    monkeypatch.setattr(rendering, "console", console)
    return console


@pytest.fixture(autouse=True)
def xdg_dirs(monkeypatch: pytest.MonkeyPatch, tmp_path: Any) -> None:
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))


@pytest.fixture
def prompt_session() -> ScriptedPromptSession:
    return ScriptedPromptSession()


@pytest.fixture
def prompts(prompt_session: ScriptedPromptSession) -> PromptController:
    return PromptController(prompt_session)  # type: ignore[arg-type]


@pytest.fixture
def account() -> MockAccount:
    return MockAccount()


@pytest.fixture
def session() -> MockSession:
    return MockSession()


@pytest.fixture
def output(recorder: Console) -> Callable[[], str]:
    """Return everything printed so far, without clearing the record."""
    return lambda: recorder.export_text(clear=False)
