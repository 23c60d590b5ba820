"""Run external programs from coroutines.

The coding agent can take the better part of an hour, so it is started
with ``asyncio.create_subprocess_exec`` and awaited rather than blocking
the loop. Arguments are passed as a list; nothing goes through a shell.
"""

import asyncio
import subprocess
from collections.abc import Mapping
from pathlib import Path


def _decode(data: bytes | None) -> str:
    return (data or b"").decode("utf-8", errors="replace")


async def run_command(
    *args: str,
    cwd: Path | str | None = None,
    check: bool = True,
    timeout: float | None = None,
    input: str | None = None,
    env: Mapping[str, str] | None = None,
) -> tuple[str, str, int]:
    """Execute ``args`` and collect its output.

    Args:
        *args: Program followed by its arguments
        cwd: Directory to run in
        check: Raise ``CalledProcessError`` on a non-zero exit
        timeout: Seconds before the process is killed
        input: Text fed to stdin; prompts go here instead of argv
        env: Replacement environment; ``None`` inherits the current one

    Returns:
        ``(stdout, stderr, returncode)`` with undecodable bytes replaced

    Raises:
        TimeoutError: The process outlived ``timeout`` and was killed
        FileNotFoundError: The program does not exist
    """
    stdin = asyncio.subprocess.PIPE if input is not None else asyncio.subprocess.DEVNULL
    process = await asyncio.create_subprocess_exec(
        *args,
        cwd=cwd,
        env=None if env is None else dict(env),
        stdin=stdin,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )

    payload = input.encode("utf-8") if input is not None else None
    try:
        raw_out, raw_err = await asyncio.wait_for(process.communicate(input=payload), timeout=timeout)
    except TimeoutError:
        process.kill()
        await process.wait()
        raise

    returncode = process.returncode or 0
    stdout, stderr = _decode(raw_out), _decode(raw_err)
    if check and returncode != 0:
        raise subprocess.CalledProcessError(returncode, list(args), stdout, stderr)
    return stdout, stderr, returncode
