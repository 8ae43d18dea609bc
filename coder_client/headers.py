"""Custom request headers produced by an external command."""

from __future__ import annotations

import asyncio
import os
import re

from .errors import HeaderCommandError

_BLANK = re.compile(r"\s")


def parse_headers(output: str) -> dict[str, str]:
    """Parse ``key=value`` lines printed by a header command.

    Blank lines are skipped. Values may contain ``=``.

    Raises:
        HeaderCommandError: If a line has no ``=``, an empty key, or a key
            containing whitespace.
    """
    headers: dict[str, str] = {}
    for line in output.splitlines():
        if not line.strip():
            continue
        key, sep, value = line.partition("=")
        if not sep:
            raise HeaderCommandError(f'"{line}" does not have two parts')
        if not key.strip():
            raise HeaderCommandError(f'"{line}" has an empty key')
        if _BLANK.search(key):
            raise HeaderCommandError(f'"{line}" has an invalid key')
        headers[key] = value
    return headers


async def get_headers(url: str, command: str | None) -> dict[str, str]:
    """Run the header command for ``url`` and return the headers it prints.

    The command runs through the platform shell with ``CODER_URL`` set.
    An unset or blank command yields no headers.

    Raises:
        HeaderCommandError: If the command exits non-zero or prints
            malformed output.
    """
    if not command or not command.strip():
        return {}

    env = {**os.environ, "CODER_URL": url}
    try:
        proc = await asyncio.create_subprocess_shell(
            command,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            env=env,
        )
        stdout, stderr = await proc.communicate()
    except OSError as err:
        raise HeaderCommandError(f"Unable to run header command: {err}") from err

    if proc.returncode != 0:
        raise HeaderCommandError(
            f"Header command exited with code {proc.returncode}: "
            f"{stderr.decode(errors='replace').strip()}"
        )
    return parse_headers(stdout.decode(errors="replace"))
