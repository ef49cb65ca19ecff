import os
from enum import Enum
from pathlib import Path
from typing import Callable, Dict

import pytest

import channel_repl.runtime_config as config_module
from channel_repl.runtime_config import (
    RoleChoice,
    RuntimeConfig,
    get_config_dir,
    get_data_dir,
    load_envs,
)


@pytest.mark.parametrize(
    "enum_class,expected_values",
    [
        (RoleChoice, {"initiator", "responder"}),
    ],
)
def test_enum_values(enum_class: type[Enum], expected_values: set[str]) -> None:
    """Test that enum classes have the expected values."""
    choices = {c.value for c in enum_class}
    assert choices == expected_values


def test_runtime_config_defaults() -> None:
    cfg = RuntimeConfig(
        url="wss://node/channel",
        role=RoleChoice.responder,
        initiator_id="ak_init",
        responder_id="ak_resp",
    )
    assert cfg.port == 3001
    assert cfg.lock_period == 10
    assert cfg.host is None
    assert cfg.backend is None


@pytest.mark.parametrize(
    "host,expect_host",
    [
        ("localhost", True),
        (None, False),
    ],
)
def test_channel_params_use_protocol_names(host: str, expect_host: bool) -> None:
    cfg = RuntimeConfig(
        url="wss://node/channel",
        role=RoleChoice.initiator,
        initiator_id="ak_init",
        responder_id="ak_resp",
        initiator_amount=50,
        responder_amount=40,
        push_amount=3,
        channel_reserve=2,
        ttl=1000,
        host=host,
    )
    params = cfg.channel_params()

    assert params["role"] == "initiator"
    assert params["initiatorId"] == "ak_init"
    assert params["responderId"] == "ak_resp"
    assert params["initiatorAmount"] == 50
    assert params["responderAmount"] == 40
    assert params["pushAmount"] == 3
    assert params["channelReserve"] == 2
    assert params["lockPeriod"] == 10
    assert ("host" in params) is expect_host


@pytest.fixture
def mock_dotenv(monkeypatch: pytest.MonkeyPatch) -> Callable[[Dict[str, str]], None]:
    """Mock dotenv_values to return test values."""

    def _mock(values: Dict[str, str]) -> None:
        monkeypatch.setattr(
            config_module, "dotenv_values", lambda env_file=None: values
        )

    return _mock


@pytest.mark.parametrize(
    "existing_env,dotenv_vals,expected",
    [
        # Test loading from dotenv when env vars not set
        (
            {},
            {"CHANNEL_URL": "wss://from-env", "CHANNEL_BACKEND": "pkg.backend"},
            {"CHANNEL_URL": "wss://from-env", "CHANNEL_BACKEND": "pkg.backend"},
        ),
        # Test not overriding existing env vars
        (
            {"CHANNEL_URL": "wss://shell", "CHANNEL_BACKEND": "shell.backend"},
            {"CHANNEL_URL": "wss://from-env", "CHANNEL_BACKEND": "pkg.backend"},
            {"CHANNEL_URL": "wss://shell", "CHANNEL_BACKEND": "shell.backend"},
        ),
    ],
)
def test_load_envs_behavior(
    existing_env: Dict[str, str],
    dotenv_vals: Dict[str, str],
    expected: Dict[str, str],
    monkeypatch: pytest.MonkeyPatch,
    mock_dotenv: Callable[[Dict[str, str]], None],
) -> None:
    """Test load_envs behavior with different environment configurations."""
    monkeypatch.delenv("CHANNEL_URL", raising=False)
    monkeypatch.delenv("CHANNEL_BACKEND", raising=False)

    for key, value in existing_env.items():
        monkeypatch.setenv(key, value)

    mock_dotenv(dotenv_vals)

    load_envs()

    assert os.environ.get("CHANNEL_URL") == expected["CHANNEL_URL"]
    assert os.environ.get("CHANNEL_BACKEND") == expected["CHANNEL_BACKEND"]


def test_load_envs_with_explicit_env_file(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    # Ensure load_envs loads keys from an explicit .env file path
    env_file = tmp_path / ".custom_env"
    env_file.write_text("CHANNEL_URL=wss://explicit\nCHANNEL_SECRET_KEY=EXPLICIT_SK\n")
    monkeypatch.delenv("CHANNEL_URL", raising=False)
    monkeypatch.delenv("CHANNEL_SECRET_KEY", raising=False)

    load_envs(env_file=str(env_file))

    assert os.environ.get("CHANNEL_URL") == "wss://explicit"
    assert os.environ.get("CHANNEL_SECRET_KEY") == "EXPLICIT_SK"


def test_xdg_directories(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "cfg"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "share"))

    assert get_config_dir() == tmp_path / "cfg" / "channel_repl"
    assert get_data_dir() == tmp_path / "share" / "channel_repl"
