"""
Loading of the channel backend.

A backend is any importable module (or object inside one, written as
``module:attribute``) that provides two factories:

- ``create_session(config, sign)`` returning a channel session
- ``create_account(config)`` returning the signing account
"""

import importlib
import logging
from dataclasses import dataclass
from typing import Any

from channel_repl.channel.session import AccountFactory, SessionFactory

logger = logging.getLogger(__name__)


class BackendLoadError(Exception):
    """Raised when the configured backend cannot be imported or is incomplete."""


@dataclass(frozen=True)
class Backend:
    create_session: SessionFactory
    create_account: AccountFactory


def _import_target(path: str) -> Any:
    module_name, _, attribute = path.partition(":")
    if not module_name:
        raise BackendLoadError(f"Invalid backend path: {path!r}")
    try:
        target: Any = importlib.import_module(module_name)
    except ImportError as e:
        raise BackendLoadError(f"Cannot import backend module {module_name!r}: {e}") from e
    for part in filter(None, attribute.split(".")):
        try:
            target = getattr(target, part)
        except AttributeError as e:
            raise BackendLoadError(f"Backend {path!r} has no attribute {part!r}") from e
    return target


def load_backend(path: str) -> Backend:
    """Resolve ``path`` to a :class:`Backend`."""
    target = _import_target(path)
    missing = [
        name
        for name in ("create_session", "create_account")
        if not callable(getattr(target, name, None))
    ]
    if missing:
        raise BackendLoadError(f"Backend {path!r} does not provide {', '.join(missing)}")
    logger.info(f"Loaded channel backend {path!r}")
    return Backend(
        create_session=target.create_session,
        create_account=target.create_account,
    )
