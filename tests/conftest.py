import shlex
import sys
from pathlib import Path

import pytest

from uciclient.engine.config import EngineConfig

FAKE_ENGINE = Path(__file__).resolve().parent / "fixtures" / "fake_engine.py"


@pytest.fixture
def engine_log(tmp_path: Path) -> Path:
    return tmp_path / "commands.log"


@pytest.fixture
def fake_engine(tmp_path: Path, engine_log: Path):
    """Return a factory that writes an executable launching the fake engine.

    The engine is spawned without arguments, so the scenario flags are baked
    into a small shell wrapper.
    """
    counter = 0

    def make(*args: str) -> str:
        nonlocal counter
        counter += 1
        argv = [sys.executable, str(FAKE_ENGINE), *args, "--log", str(engine_log)]
        script = tmp_path / f"engine{counter}"
        script.write_text("#!/bin/sh\nexec " + " ".join(shlex.quote(arg) for arg in argv) + "\n")
        script.chmod(0o755)
        return str(script)

    return make


@pytest.fixture
def sent_commands(engine_log: Path):
    def read() -> list:
        if not engine_log.exists():
            return []
        return engine_log.read_text(encoding="utf-8").splitlines()

    return read


@pytest.fixture
def config() -> EngineConfig:
    return EngineConfig(
        request_timeout=10.0,
        handshake_timeout=10.0,
        ready_timeout=10.0,
        quit_timeout=2.0,
    )
