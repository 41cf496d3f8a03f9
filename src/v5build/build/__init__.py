"""
Build system components for v5build.

This module provides the build pipeline:
- Toolchain preflight (nightly rustc, wasm target)
- Target descriptor provisioning
- cargo process driving and JSON message decoding
- Artifact postprocessing (objcopy strip + raw image)
"""

from .driver import (
    ArtifactHandler,
    BuildDriver,
    BuildRequest,
    BuildResult,
    CollectingHandler,
    PostprocessHandler,
)
from .messages import (
    CompilerArtifact,
    CompilerMessage,
    MessageDecodeError,
    OtherMessage,
    parse_message_stream,
)
from .postprocess import ArtifactPostprocessor, PostprocessResult
from .preflight import PreflightError, ToolchainNotReadyError, ToolchainPreflight
from .process_utils import ToolNotFoundError
from .simulator import Simulator, SimulatorError
from .target import TargetMode, TargetProvisioner

__all__ = [
    "ArtifactHandler",
    "ArtifactPostprocessor",
    "BuildDriver",
    "BuildRequest",
    "BuildResult",
    "CollectingHandler",
    "CompilerArtifact",
    "CompilerMessage",
    "MessageDecodeError",
    "OtherMessage",
    "PostprocessHandler",
    "PostprocessResult",
    "PreflightError",
    "Simulator",
    "SimulatorError",
    "TargetMode",
    "TargetProvisioner",
    "ToolNotFoundError",
    "ToolchainNotReadyError",
    "ToolchainPreflight",
    "parse_message_stream",
]
