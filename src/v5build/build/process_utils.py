"""Subprocess helpers shared by the build driver and postprocessor.

External tools (cargo, objcopy) are started through `spawn_tool` so that a
missing binary is always reported the same way: a `ToolNotFoundError` naming
the command, which the CLI turns into a diagnostic and exit status 1.
"""

import logging
import subprocess
from pathlib import Path
from typing import Any, List, Optional, Sequence

logger = logging.getLogger(__name__)

DOCS_URL = "https://github.com/vexide/cargo-v5#compiling"


class ToolNotFoundError(Exception):
    """Raised when an external tool binary cannot be found on the system path."""

    def __init__(self, command: str):
        self.command = command
        super().__init__(f"command `{command}` not found")


def spawn_tool(
    cmd: Sequence[str],
    cwd: Optional[Path] = None,
    stdout: Any = None,
    **kwargs: Any,
) -> "subprocess.Popen[Any]":
    """Start an external tool, translating a missing binary into ToolNotFoundError.

    Args:
        cmd: Command and arguments; cmd[0] is the program
        cwd: Working directory for the child process
        stdout: stdout disposition (e.g. subprocess.PIPE), inherited if None
        **kwargs: Extra arguments forwarded to subprocess.Popen

    Returns:
        The started process

    Raises:
        ToolNotFoundError: If the program does not exist
        FileNotFoundError: If cwd does not exist
        OSError: For any other spawn failure
    """
    args: List[str] = [str(part) for part in cmd]
    logger.debug(f"Running: {' '.join(args)}")

    # Popen reports a missing cwd as FileNotFoundError too
    if cwd is not None and not Path(cwd).is_dir():
        raise FileNotFoundError(f"Working directory does not exist: {cwd}")

    try:
        return subprocess.Popen(args, cwd=cwd, stdout=stdout, **kwargs)
    except FileNotFoundError:
        raise ToolNotFoundError(args[0])


def run_tool(cmd: Sequence[str], cwd: Optional[Path] = None) -> int:
    """Run an external tool to completion and return its exit status.

    Output is captured and logged at debug level.

    Raises:
        ToolNotFoundError: If the program does not exist
    """
    process = spawn_tool(
        cmd,
        cwd=cwd,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        text=True,
    )
    stdout, stderr = process.communicate()

    if stdout:
        logger.debug(stdout.rstrip())
    if stderr:
        logger.debug(stderr.rstrip())

    return process.returncode
