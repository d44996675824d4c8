"""Read the primary selection or the clipboard through an external command."""

from __future__ import annotations

import asyncio
import logging
import os
import shlex
import shutil
from typing import Callable, Literal, Mapping

logger = logging.getLogger(__name__)

SelectionSource = Literal["primary", "clipboard"]

PASTE_TIMEOUT = 2.0

# First available tool wins
_DEFAULT_COMMANDS: dict[SelectionSource, list[list[str]]] = {
    "primary": [
        ["wl-paste", "--no-newline", "--primary"],
        ["xclip", "-o", "-selection", "primary"],
        ["xsel", "--output", "--primary"],
    ],
    "clipboard": [
        ["wl-paste", "--no-newline"],
        ["xclip", "-o", "-selection", "clipboard"],
        ["xsel", "--output", "--clipboard"],
        ["pbpaste"],
    ],
}


def default_paste_command(
    source: SelectionSource,
    env: Mapping[str, str] | None = None,
    which: Callable[[str], str | None] = shutil.which,
) -> list[str] | None:
    """Pick a selection reader for the current session, or ``None``."""
    env = os.environ if env is None else env
    wayland = bool(env.get("WAYLAND_DISPLAY"))
    for argv in _DEFAULT_COMMANDS[source]:
        if argv[0] == "wl-paste" and not wayland:
            continue
        if which(argv[0]) is not None:
            return argv
    return None


class PasteProvider:
    """Fetches selection contents for the paste commands.

    Failures (no tool, non-zero exit, timeout) are logged and produce
    ``None``; the menu then simply pastes nothing.
    """

    def __init__(
        self,
        paste_command: str | None = None,
        clipboard_command: str | None = None,
        *,
        timeout: float = PASTE_TIMEOUT,
    ) -> None:
        self._commands: dict[SelectionSource, str | None] = {
            "primary": paste_command,
            "clipboard": clipboard_command,
        }
        self.timeout = timeout

    def command_for(self, source: SelectionSource) -> list[str] | None:
        configured = self._commands[source]
        if configured:
            return shlex.split(configured)
        return default_paste_command(source)

    async def read(self, source: SelectionSource) -> bytes | None:
        argv = self.command_for(source)
        if not argv:
            logger.info("no command available to read the %s selection", source)
            return None

        try:
            proc = await asyncio.create_subprocess_exec(
                *argv,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            logger.warning("failed to run %s: %s", argv[0], e)
            return None

        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), self.timeout)
        except asyncio.TimeoutError:
            proc.kill()
            await proc.wait()
            logger.warning("%s timed out after %.1fs", argv[0], self.timeout)
            return None

        if proc.returncode != 0:
            logger.warning(
                "%s exited with %d: %s",
                argv[0],
                proc.returncode,
                stderr.decode("utf-8", errors="replace").strip(),
            )
            return None
        logger.debug("read %d bytes from the %s selection", len(stdout), source)
        return stdout
