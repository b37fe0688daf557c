import asyncio
import logging
import time

import pytest

from uciclient.engine.process import EngineProcess
from uciclient.protocol.errors import AlreadyRunning, NotRunning, SpawnFailed


def test_missing_executable_fails_to_spawn(tmp_path):
    missing = tmp_path / "no-such-engine"
    process = EngineProcess(str(missing))

    with pytest.raises(SpawnFailed) as excinfo:
        asyncio.run(process.start())

    assert excinfo.value.path == str(missing)
    assert isinstance(excinfo.value.cause, OSError)
    assert not process.is_running


def test_start_twice_is_rejected(fake_engine):
    process = EngineProcess(fake_engine("--name", "Fake"))

    async def scenario():
        await process.start()
        try:
            with pytest.raises(AlreadyRunning):
                await process.start()
        finally:
            await process.stop()

    asyncio.run(scenario())
    assert not process.is_running


def test_send_before_start_fails():
    process = EngineProcess("unused")
    with pytest.raises(NotRunning):
        asyncio.run(process.send_command("uci"))


def test_multiline_command_is_rejected(fake_engine):
    process = EngineProcess(fake_engine())

    async def scenario():
        await process.start()
        try:
            with pytest.raises(ValueError):
                await process.send_command("setoption name Hash\nquit")
        finally:
            await process.stop()

    asyncio.run(scenario())


def test_stop_is_idempotent_and_sends_quit(fake_engine, sent_commands):
    process = EngineProcess(fake_engine())

    async def scenario():
        await process.stop()
        await process.start()
        await process.send_command("isready")
        await process.stop()
        await process.stop()

    asyncio.run(scenario())
    assert sent_commands() == ["isready", "quit"]
    assert process.returncode is None
    assert process.stdout.closed
    assert process.stderr.closed


def test_stop_kills_engine_that_ignores_quit(fake_engine):
    process = EngineProcess(fake_engine("--ignore-quit"), quit_timeout=0.2)

    async def scenario():
        await process.start()
        started = time.monotonic()
        await process.stop()
        return time.monotonic() - started

    elapsed = asyncio.run(scenario())
    assert elapsed < 10
    assert not process.is_running


def test_stdout_lines_reach_callback_and_subscribers(fake_engine):
    process = EngineProcess(fake_engine("--name", "Fake"))
    heard = []
    process.set_callback(heard.append)

    async def scenario():
        await process.start()
        with process.stdout.subscribe() as lines:
            await process.send_command("uci")
            received = []
            async for line in lines:
                received.append(line)
                if line == "uciok":
                    break
        await process.stop()
        return received

    received = asyncio.run(scenario())
    assert received == ["id name Fake", "uciok"]
    assert heard[: len(received)] == received


def test_stderr_lines_are_logged(fake_engine, caplog):
    caplog.set_level(logging.DEBUG, logger="uciclient.engine.process")
    process = EngineProcess(fake_engine("--stderr", "NNUE file loaded"))

    async def scenario():
        await process.start()
        with process.stderr.subscribe() as errors:
            line = await asyncio.wait_for(errors.get(), 10)
        await process.stop()
        return line

    assert asyncio.run(scenario()) == "NNUE file loaded"
    assert "stderr: NNUE file loaded" in caplog.text


def test_concurrent_sends_are_written_whole_and_in_order(fake_engine, sent_commands):
    process = EngineProcess(fake_engine())
    commands = [f"setoption name Option{i} value {'x' * 200}{i}" for i in range(50)]

    async def scenario():
        await process.start()
        try:
            await asyncio.gather(*(process.send_command(command) for command in commands))
        finally:
            await process.stop()

    asyncio.run(scenario())
    assert sent_commands() == commands + ["quit"]


def test_exited_engine_is_not_running(fake_engine):
    process = EngineProcess(fake_engine("--exit-on-go"))

    async def scenario():
        await process.start()
        try:
            await process.send_command("go depth 1")
            await asyncio.wait_for(process.stdout.wait_closed(), 10)
            return process.is_running
        finally:
            await process.stop()

    assert asyncio.run(scenario()) is False
