import asyncio
import logging
from enum import Enum
from typing import Callable, Optional, Protocol

import typer
from typing_extensions import Annotated

from channel_repl.backend import BackendLoadError, load_backend
from channel_repl.channel.session import (
    AccountFactory,
    AccountProtocol,
    ChannelSessionProtocol,
    SessionFactory,
    SignCallback,
)
from channel_repl.console.event_bridge import EXIT_ABORTED, ChannelEventBridge
from channel_repl.logger import setup_logging
from channel_repl.runtime_config import (
    CHANNEL_BACKEND_ENV,
    CHANNEL_SECRET_KEY_ENV,
    CHANNEL_URL_ENV,
    RoleChoice,
    RuntimeConfig,
    load_envs,
)

logger = logging.getLogger(__name__)


class ConsoleInterface(Protocol):
    """Anything that can drive a channel session to completion."""

    async def run(self) -> int: ...


ConsoleFactory = Callable[
    [AccountProtocol, Callable[[SignCallback], ChannelSessionProtocol]],
    ConsoleInterface,
]


class LogLevel(str, Enum):
    debug = "debug"
    info = "info"
    warning = "warning"
    error = "error"

    def to_logging(self) -> int:
        return int(getattr(logging, self.value.upper()))


# Global factory functions - set by create_app()
_session_factory: Optional[SessionFactory] = None
_account_factory: Optional[AccountFactory] = None
_console_factory: Optional[ConsoleFactory] = None


def default_console_factory(
    account: AccountProtocol,
    session_factory: Callable[[SignCallback], ChannelSessionProtocol],
) -> ConsoleInterface:
    """Default factory for creating the interactive channel console."""
    return ChannelEventBridge(account, session_factory)


def main(
    url: Annotated[
        str,
        typer.Option(envvar=CHANNEL_URL_ENV, help="Channel service websocket URL"),
    ],
    role: Annotated[
        RoleChoice,
        typer.Option("--role", "-r", help="Open the channel (initiator) or accept it"),
    ],
    initiator_id: Annotated[
        str, typer.Option(help="Initiator account address (ak_...)")
    ],
    responder_id: Annotated[
        str, typer.Option(help="Responder account address (ak_...)")
    ],
    initiator_amount: Annotated[
        int, typer.Option(min=0, help="Initial deposit of the initiator")
    ] = 0,
    responder_amount: Annotated[
        int, typer.Option(min=0, help="Initial deposit of the responder")
    ] = 0,
    push_amount: Annotated[
        int, typer.Option(min=0, help="Amount pushed to the responder on open")
    ] = 0,
    channel_reserve: Annotated[
        int, typer.Option(min=0, help="Minimum balance kept by each participant")
    ] = 0,
    ttl: Annotated[
        int, typer.Option(min=0, help="TTL of the channel create transaction")
    ] = 0,
    host: Annotated[
        Optional[str],
        typer.Option(help="Host of the responder (required for the initiator)"),
    ] = None,
    port: Annotated[int, typer.Option(help="Port of the responder")] = 3001,
    lock_period: Annotated[
        int, typer.Option(min=0, help="Blocks before a solo close can settle")
    ] = 10,
    secret_key: Annotated[
        Optional[str],
        typer.Option(envvar=CHANNEL_SECRET_KEY_ENV, help="Secret key of the account"),
    ] = None,
    backend: Annotated[
        Optional[str],
        typer.Option(
            envvar=CHANNEL_BACKEND_ENV,
            help="Module providing create_session and create_account (module[:attr])",
        ),
    ] = None,
    log_level: Annotated[
        LogLevel, typer.Option("--log-level", help="Log file verbosity")
    ] = LogLevel.info,
) -> None:
    """CHANNEL REPL - operate an off-chain payment channel from the terminal"""
    log_path = setup_logging(log_level.to_logging())

    errors = [
        f"{name} must be an account address (ak_...)"
        for name, value in (
            ("--initiator-id", initiator_id),
            ("--responder-id", responder_id),
        )
        if not value.startswith("ak_")
    ]
    if role == RoleChoice.initiator and not host:
        errors.append("--host is required when acting as initiator")
    if errors:
        for error in errors:
            typer.echo(f"Error: {error}", err=True)
        raise typer.Exit(code=1)

    cfg = RuntimeConfig(
        url=url,
        role=role,
        initiator_id=initiator_id,
        responder_id=responder_id,
        initiator_amount=initiator_amount,
        responder_amount=responder_amount,
        push_amount=push_amount,
        channel_reserve=channel_reserve,
        ttl=ttl,
        host=host,
        port=port,
        lock_period=lock_period,
        secret_key=secret_key,
        backend=backend,
    )

    session_factory = _session_factory
    account_factory = _account_factory
    if session_factory is None or account_factory is None:
        if not backend:
            typer.echo(
                f"Error: no channel backend configured. Use --backend or set {CHANNEL_BACKEND_ENV}",
                err=True,
            )
            raise typer.Exit(code=1)
        try:
            loaded = load_backend(backend)
        except BackendLoadError as e:
            typer.echo(f"Error: {e}", err=True)
            raise typer.Exit(code=1)
        session_factory = session_factory or loaded.create_session
        account_factory = account_factory or loaded.create_account

    logger.info(
        f"Starting channel session as {cfg.role.value} on {cfg.url} (log: {log_path})"
    )

    bound_factory = session_factory

    def build_session(sign: SignCallback) -> ChannelSessionProtocol:
        return bound_factory(cfg, sign)

    console_fact = _console_factory or default_console_factory
    try:
        console = console_fact(account_factory(cfg), build_session)
        exit_code = asyncio.run(console.run())
    except KeyboardInterrupt:
        typer.echo("\nExiting...")
        exit_code = EXIT_ABORTED
    logger.info(f"Channel session ended with exit code {exit_code}")
    raise typer.Exit(code=exit_code)


def create_app(
    session_factory: Optional[SessionFactory] = None,
    account_factory: Optional[AccountFactory] = None,
    console_factory: Optional[ConsoleFactory] = None,
) -> typer.Typer:
    """
    Create and configure the Typer application.

    Args:
        session_factory: Factory creating the channel session (overrides the backend)
        account_factory: Factory creating the signing account (overrides the backend)
        console_factory: Factory creating the console that drives the session

    Returns:
        Typer application
    """
    # Load channel settings from .env if not already set in the environment
    load_envs()

    # Set global factory functions
    global _session_factory, _account_factory, _console_factory
    _session_factory = session_factory
    _account_factory = account_factory
    _console_factory = console_factory

    app = typer.Typer(rich_markup_mode=None)
    app.command()(main)
    return app


# Create default app instance for the console script
app = create_app()


if __name__ == "__main__":
    app()
