"""Simulator runner.

The simulator is an external program that takes the path of a WebAssembly
binary and reports simulation events as JSON lines on stdout. v5build relays
those events unchanged.
"""

import json
import logging
import subprocess
import sys
from pathlib import Path
from typing import IO, Any, Callable, TextIO, cast

from .process_utils import spawn_tool

logger = logging.getLogger(__name__)

EventCallback = Callable[[Any], None]


class SimulatorError(Exception):
    """Raised when the simulator exits unsuccessfully."""

    pass


def jsonl_writer(stream: TextIO = sys.stdout) -> EventCallback:
    """Return a callback that writes each event as one JSON line."""

    def write(event: Any) -> None:
        stream.write(json.dumps(event) + "\n")
        stream.flush()

    return write


class Simulator:
    """Runs a WebAssembly robot program in the external simulator."""

    def __init__(self, command: str):
        """Initialize simulator.

        Args:
            command: Simulator executable
        """
        self.command = command

    def simulate(self, wasm_path: Path, on_event: EventCallback) -> None:
        """Run the simulator until it exits, forwarding every event.

        Lines that are not JSON are forwarded as plain strings.

        Raises:
            ToolNotFoundError: If the simulator is not installed
            SimulatorError: If the simulator exits with a non-zero status
        """
        process = spawn_tool(
            [self.command, str(wasm_path)],
            stdout=subprocess.PIPE,
            text=True,
        )

        stdout = cast(IO[str], process.stdout)
        try:
            for line in stdout:
                line = line.strip()
                if not line:
                    continue
                try:
                    event = json.loads(line)
                except json.JSONDecodeError:
                    event = line
                on_event(event)
        finally:
            stdout.close()
            returncode = process.wait()

        if returncode != 0:
            raise SimulatorError(f"Simulator exited with status {returncode}")
