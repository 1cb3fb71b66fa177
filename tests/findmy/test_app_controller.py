"""Tests for AppController."""

import asyncio
import json

import pytest

from findmy_bridge.errors import AppleScriptError, UnsupportedPlatform
from findmy_bridge.findmy import AppController, RefreshTiming
from findmy_bridge.findmy.app import (
    hide_script,
    launch_script,
    quit_script,
    run_osascript,
    show_script,
)
from findmy_bridge.logging import JSONLLogger


class Recorder:
    """Records script runs and sleeps in call order."""

    def __init__(self, fail_on: str | None = None) -> None:
        self.calls: list[tuple[str, object]] = []
        self.fail_on = fail_on

    async def run(self, script: str) -> str:
        self.calls.append(("run", script))
        if self.fail_on and self.fail_on in script:
            raise AppleScriptError("execution error: not allowed (-1743)")
        return ""

    async def sleep(self, seconds: float) -> None:
        self.calls.append(("sleep", seconds))


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()


@pytest.fixture
def controller(recorder: Recorder) -> AppController:
    return AppController(runner=recorder.run, sleep=recorder.sleep)


class TestScripts:
    def test_scripts_name_the_app(self):
        for build in (quit_script, launch_script, show_script, hide_script):
            assert '"Maps"' in build("Maps")

    def test_quit_only_if_running(self):
        script = quit_script("FindMy")
        assert 'exists process "FindMy"' in script
        assert 'tell application "FindMy" to quit' in script

    def test_launch_reopens_then_launches(self):
        script = launch_script("FindMy")
        assert script.index("reopen") < script.index("to launch")

    def test_show_and_hide_toggle_visibility(self):
        assert "set visible of process \"FindMy\" to true" in show_script("FindMy")
        assert "set visible of process \"FindMy\" to false" in hide_script("FindMy")


class TestRefreshCycle:
    @pytest.mark.asyncio
    async def test_step_order_and_delays(self, controller: AppController, recorder: Recorder):
        await controller.refresh_cycle()

        expected = [
            ("run", quit_script("FindMy")),
            ("sleep", 3.0),
            ("run", launch_script("FindMy")),
            ("sleep", 5.0),
            ("run", show_script("FindMy")),
            ("sleep", 15.0),
            ("run", hide_script("FindMy")),
        ]
        assert recorder.calls == expected

    @pytest.mark.asyncio
    async def test_custom_timing(self, recorder: Recorder):
        controller = AppController(
            timing=RefreshTiming(after_quit=0.1, after_launch=0.2, after_show=0.3),
            runner=recorder.run,
            sleep=recorder.sleep,
        )

        await controller.refresh_cycle()

        assert [arg for kind, arg in recorder.calls if kind == "sleep"] == [0.1, 0.2, 0.3]

    @pytest.mark.asyncio
    async def test_failure_aborts_cycle(self):
        recorder = Recorder(fail_on="reopen")
        controller = AppController(runner=recorder.run, sleep=recorder.sleep)

        with pytest.raises(AppleScriptError):
            await controller.refresh_cycle()

        # quit, sleep, failed launch; nothing after
        assert len(recorder.calls) == 3
        assert recorder.calls[-1] == ("run", launch_script("FindMy"))

    @pytest.mark.asyncio
    async def test_failure_is_logged(self, event_log: JSONLLogger):
        recorder = Recorder(fail_on="to quit")
        controller = AppController(runner=recorder.run, sleep=recorder.sleep)

        with pytest.raises(AppleScriptError):
            await controller.quit()

        with open(event_log.log_path) as f:
            entry = json.loads(f.readline())
        assert entry["event"] == "applescript_error"
        assert entry["extra"]["step"] == "quit"
        assert "-1743" in entry["error"]

    @pytest.mark.asyncio
    async def test_cycle_is_logged(self, controller: AppController, event_log: JSONLLogger):
        await controller.refresh_cycle()

        with open(event_log.log_path) as f:
            entries = [json.loads(line) for line in f]
        assert entries[-1]["event"] == "app_refresh_cycle"
        assert entries[-1]["extra"]["app"] == "FindMy"
        assert "duration_ms" in entries[-1]


class FakeProcess:
    def __init__(self, returncode: int, stdout: bytes = b"", stderr: bytes = b"") -> None:
        self.returncode = returncode
        self._output = (stdout, stderr)

    async def communicate(self) -> tuple[bytes, bytes]:
        return self._output


class TestRunOsascript:
    @pytest.mark.asyncio
    async def test_returns_stdout(self, monkeypatch):
        calls = []

        async def fake_exec(*args, **kwargs):
            calls.append(args)
            return FakeProcess(0, stdout=b"true\n")

        monkeypatch.setattr(asyncio, "create_subprocess_exec", fake_exec)

        assert await run_osascript('tell application "FindMy" to launch') == "true"
        assert calls[0][:2] == ("osascript", "-e")

    @pytest.mark.asyncio
    async def test_nonzero_exit_raises(self, monkeypatch):
        async def fake_exec(*args, **kwargs):
            return FakeProcess(1, stderr=b"execution error: Not authorized (-1743)\n")

        monkeypatch.setattr(asyncio, "create_subprocess_exec", fake_exec)

        with pytest.raises(AppleScriptError, match="-1743"):
            await run_osascript("bogus")

    @pytest.mark.asyncio
    async def test_missing_osascript(self, monkeypatch):
        async def fake_exec(*args, **kwargs):
            raise FileNotFoundError("osascript")

        monkeypatch.setattr(asyncio, "create_subprocess_exec", fake_exec)

        with pytest.raises(UnsupportedPlatform):
            await run_osascript("bogus")
