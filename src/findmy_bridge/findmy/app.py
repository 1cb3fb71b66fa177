"""AppleScript control of the Find My app.

The app has no "refresh now" API, so a refresh is forced by restarting it and
bringing it to the foreground long enough for it to rewrite its caches.
"""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from ..errors import AppleScriptError, UnsupportedPlatform
from ..logging import get_logger

logger = logging.getLogger(__name__)

ScriptRunner = Callable[[str], Awaitable[str]]
Sleeper = Callable[[float], Awaitable[None]]


@dataclass
class RefreshTiming:
    """Delays (seconds) between the steps of a refresh cycle."""

    after_quit: float = 3.0
    after_launch: float = 5.0
    after_show: float = 15.0


def quit_script(app_name: str) -> str:
    return f'''
        tell application "System Events"
            if (exists process "{app_name}") then
                tell application "{app_name}" to quit
            end if
        end tell'''


def launch_script(app_name: str) -> str:
    return f'''
        tell application "{app_name}" to reopen
        delay 1
        tell application "{app_name}" to launch'''


def show_script(app_name: str) -> str:
    return f'''
        tell application "{app_name}" to activate
        tell application "System Events"
            set visible of process "{app_name}" to true
        end tell'''


def hide_script(app_name: str) -> str:
    return f'''
        tell application "System Events"
            if (exists process "{app_name}") then
                set visible of process "{app_name}" to false
            end if
        end tell'''


async def run_osascript(script: str) -> str:
    """Run an AppleScript via osascript and return its stdout."""
    try:
        proc = await asyncio.create_subprocess_exec(
            "osascript",
            "-e",
            script,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except FileNotFoundError as e:
        raise UnsupportedPlatform("osascript not found; app control requires macOS") from e
    stdout, stderr = await proc.communicate()
    if proc.returncode != 0:
        raise AppleScriptError(stderr.decode("utf-8", errors="replace").strip())
    return stdout.decode("utf-8", errors="replace").strip()


class AppController:
    """Quits, launches, shows and hides one macOS application."""

    def __init__(
        self,
        app_name: str = "FindMy",
        timing: RefreshTiming | None = None,
        runner: ScriptRunner | None = None,
        sleep: Sleeper | None = None,
    ) -> None:
        self.app_name = app_name
        self.timing = timing or RefreshTiming()
        self._run = runner or run_osascript
        self._sleep = sleep or asyncio.sleep

    async def _execute(self, step: str, script: str) -> None:
        try:
            await self._run(script)
        except AppleScriptError as e:
            get_logger().log("applescript_error", step=step, app=self.app_name, error=str(e))
            raise

    async def quit(self) -> None:
        await self._execute("quit", quit_script(self.app_name))

    async def launch(self) -> None:
        await self._execute("launch", launch_script(self.app_name))

    async def show(self) -> None:
        await self._execute("show", show_script(self.app_name))

    async def hide(self) -> None:
        await self._execute("hide", hide_script(self.app_name))

    async def refresh_cycle(self) -> None:
        """Quit, relaunch and foreground the app so it rewrites its caches.

        The step order and delays are fixed; the whole cycle takes about
        23 seconds with the default timing.
        """
        start_time = time.monotonic()
        logger.info("Refreshing %s via app lifecycle", self.app_name)

        await self.quit()
        await self._sleep(self.timing.after_quit)

        await self.launch()
        await self._sleep(self.timing.after_launch)

        await self.show()
        await self._sleep(self.timing.after_show)

        await self.hide()

        get_logger().log(
            "app_refresh_cycle",
            app=self.app_name,
            duration_ms=(time.monotonic() - start_time) * 1000,
        )
