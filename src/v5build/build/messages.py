"""Decoding of cargo's JSON message stream.

`cargo build --message-format json-render-diagnostics` writes one JSON object
per line to stdout. Only `compiler-artifact` messages matter to v5build; every
other message (and any line that is not JSON at all) is decoded as an
`OtherMessage` so callers can skip it.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional, Union


class MessageDecodeError(Exception):
    """Raised when a cargo message is JSON but not a valid message."""

    pass


@dataclass(frozen=True)
class CompilerArtifact:
    """A `compiler-artifact` message.

    `executable` is only set when the artifact is a runnable binary; library
    artifacts leave it unset.
    """

    package_id: str
    target_name: str
    kinds: List[str]
    filenames: List[Path]
    executable: Optional[Path]
    raw: Dict[str, Any] = field(repr=False, compare=False)


@dataclass(frozen=True)
class OtherMessage:
    """Any message v5build does not act on."""

    reason: str
    raw: Any = field(repr=False, compare=False)


CompilerMessage = Union[CompilerArtifact, OtherMessage]

TEXT_LINE = "text-line"


def parse_message(line: str) -> CompilerMessage:
    """Decode a single line of cargo output.

    Args:
        line: One line of stdout, with or without the trailing newline

    Returns:
        The decoded message

    Raises:
        MessageDecodeError: If a compiler-artifact message is malformed
    """
    stripped = line.strip()

    try:
        data = json.loads(stripped)
    except json.JSONDecodeError:
        return OtherMessage(reason=TEXT_LINE, raw=line.rstrip("\r\n"))

    if not isinstance(data, dict):
        return OtherMessage(reason=TEXT_LINE, raw=line.rstrip("\r\n"))

    reason = data.get("reason")
    if reason != "compiler-artifact":
        return OtherMessage(reason=str(reason), raw=data)

    return _parse_artifact(data)


def _parse_artifact(data: Dict[str, Any]) -> CompilerArtifact:
    try:
        target = data["target"]
        executable = data.get("executable")
        return CompilerArtifact(
            package_id=str(data["package_id"]),
            target_name=str(target["name"]),
            kinds=[str(kind) for kind in target.get("kind", [])],
            filenames=[Path(name) for name in data.get("filenames", [])],
            executable=Path(executable) if executable else None,
            raw=data,
        )
    except (KeyError, TypeError) as e:
        raise MessageDecodeError(f"Malformed compiler-artifact message: {e}")


def parse_message_stream(lines: Iterable[str]) -> Iterator[CompilerMessage]:
    """Lazily decode cargo messages in emission order.

    The returned generator reads from `lines` only as messages are requested
    and, like the underlying stream, cannot be restarted. Blank lines are
    skipped.
    """
    for line in lines:
        if not line.strip():
            continue
        yield parse_message(line)
