"""
Runtime configuration for the channel REPL.

This module provides:
- load_envs(): load CHANNEL_URL, CHANNEL_SECRET_KEY and CHANNEL_BACKEND from a .env file
  if they are not already present in the environment.
- RuntimeConfig: a dataclass holding the channel parameters, the signing key and the
  backend that provides the session and account implementations.
"""

import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import dotenv_values

# Environment variable names for endpoints and credentials
CHANNEL_URL_ENV: str = "CHANNEL_URL"
CHANNEL_SECRET_KEY_ENV: str = "CHANNEL_SECRET_KEY"
CHANNEL_BACKEND_ENV: str = "CHANNEL_BACKEND"


def load_envs(env_file: Optional[str] = None) -> None:
    """
    Load CHANNEL_URL, CHANNEL_SECRET_KEY and CHANNEL_BACKEND from a .env file
    into the process environment if they are not already set.
    """
    env_values = dotenv_values(env_file) if env_file else dotenv_values()
    for key in (
        CHANNEL_URL_ENV,
        CHANNEL_SECRET_KEY_ENV,
        CHANNEL_BACKEND_ENV,
    ):
        if not os.environ.get(key):
            val = env_values.get(key)
            if val:
                os.environ[key] = str(val)


class RoleChoice(str, Enum):
    """Which side of the channel this participant plays."""

    initiator = "initiator"
    responder = "responder"


@dataclass(frozen=True)
class RuntimeConfig:
    """
    Holds runtime configuration for a channel session.

    Attributes:
        url: Websocket endpoint of the channel service.
        role: Whether we open the channel (initiator) or accept it (responder).
        initiator_id: Account address of the initiator (ak_...).
        responder_id: Account address of the responder (ak_...).
        initiator_amount: Initial deposit of the initiator, in aettos.
        responder_amount: Initial deposit of the responder, in aettos.
        push_amount: Amount pushed to the responder on open.
        channel_reserve: Minimum balance each participant must keep.
        ttl: Time-to-live of the channel create transaction (0 = none).
        host: Host of the responder, required when acting as initiator.
        port: Port the responder listens on.
        lock_period: Blocks to wait before a solo close can be settled.
        secret_key: Key material handed to the account factory.
        backend: Import path of the module providing the session and account.
    """

    url: str
    role: RoleChoice
    initiator_id: str
    responder_id: str
    initiator_amount: int = 0
    responder_amount: int = 0
    push_amount: int = 0
    channel_reserve: int = 0
    ttl: int = 0
    host: Optional[str] = None
    port: int = 3001
    lock_period: int = 10
    secret_key: Optional[str] = None
    backend: Optional[str] = None

    def channel_params(self) -> Dict[str, Any]:
        """Return the session-construction parameters in the protocol's naming."""
        params: Dict[str, Any] = {
            "url": self.url,
            "role": self.role.value,
            "initiatorId": self.initiator_id,
            "responderId": self.responder_id,
            "initiatorAmount": self.initiator_amount,
            "responderAmount": self.responder_amount,
            "pushAmount": self.push_amount,
            "channelReserve": self.channel_reserve,
            "ttl": self.ttl,
            "port": self.port,
            "lockPeriod": self.lock_period,
        }
        if self.host:
            params["host"] = self.host
        return params


def get_config_dir() -> Path:
    """
    Return the channel REPL config directory under XDG_CONFIG_HOME or fallback to ~/.config.
    """
    config_home = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
    return config_home / "channel_repl"


def get_data_dir() -> Path:
    """
    Return the channel REPL data directory under XDG_DATA_HOME or fallback to ~/.local/share.
    """
    data_home = Path(os.environ.get("XDG_DATA_HOME", Path.home() / ".local/share"))
    return data_home / "channel_repl"
