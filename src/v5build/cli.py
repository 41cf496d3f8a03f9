"""
Command-line interface for v5build.

This module provides the `v5build` CLI tool (also usable as the cargo
subcommand `cargo v5`) for building and creating VEX V5 Rust projects.
"""

import argparse
import sys
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from v5build import __version__
from v5build.build import (
    ArtifactPostprocessor,
    BuildDriver,
    BuildRequest,
    CollectingHandler,
    PostprocessHandler,
    Simulator,
    SimulatorError,
    TargetMode,
    ToolchainNotReadyError,
    ToolNotFoundError,
)
from v5build.build.simulator import jsonl_writer
from v5build.cli_utils import ErrorFormatter, PathValidator, setup_logging, split_passthrough
from v5build.config import Settings
from v5build.templates import ProjectDirFullError, ScaffoldError, create_resolver, new_project

# Name cargo passes as the first argument when run as `cargo v5`
CARGO_SUBCOMMAND = "v5"


@dataclass
class BuildArgs:
    """Arguments for the build command."""

    project_dir: Path
    simulator: bool = False
    cargo_args: List[str] = field(default_factory=list)
    verbose: bool = False


@dataclass
class SimulateArgs:
    """Arguments for the simulate command."""

    project_dir: Path
    cargo_args: List[str] = field(default_factory=list)
    verbose: bool = False


@dataclass
class NewArgs:
    """Arguments for the new command."""

    path: Path
    name: Optional[str] = None
    offline: bool = False
    verbose: bool = False


def build_command(args: BuildArgs) -> None:
    """Build a robot program.

    Examples:
        v5build build                        # Build for the V5 brain
        v5build build --simulator            # Build for the simulator
        v5build --path robot build           # Build another project
        v5build build -- --release           # Pass arguments to cargo
    """
    settings = Settings.from_env()
    mode = TargetMode.SIMULATOR if args.simulator else TargetMode.PHYSICAL

    try:
        driver = BuildDriver(settings)
        postprocessor = ArtifactPostprocessor(settings.get_objcopy(), show_progress=True)
        handler = PostprocessHandler(postprocessor, mode)

        if args.verbose:
            print(f"Building project: {args.project_dir}")
            print(f"Target: {mode.value}")
            print()

        start_time = time.time()
        result = driver.run(
            BuildRequest(
                project_dir=args.project_dir,
                extra_args=tuple(args.cargo_args),
                target_mode=mode,
                handler=handler,
            )
        )
        build_time = time.time() - start_time

        if result.success:
            ErrorFormatter.print_success("Build successful!")
            for executable in result.executables:
                print(f"Executable: {executable}")
            print(f"Build time: {build_time:.2f}s")
            sys.exit(0)
        else:
            ErrorFormatter.print_error("Build failed!", f"cargo exited with status {result.returncode}")
            sys.exit(1)

    except ToolchainNotReadyError as e:
        ErrorFormatter.fatal(str(e), e.hint)
    except ToolNotFoundError as e:
        ErrorFormatter.handle_tool_not_found(e)
    except PermissionError as e:
        ErrorFormatter.handle_permission_error(e)
    except KeyboardInterrupt:
        ErrorFormatter.handle_keyboard_interrupt()
    except Exception as e:
        ErrorFormatter.handle_unexpected_error(e, args.verbose)


def simulate_command(args: SimulateArgs) -> None:
    """Build for the simulator and run the result.

    Simulation events are written to stdout as JSON lines.

    Examples:
        v5build simulate
        v5build simulate -- --release
    """
    settings = Settings.from_env()

    try:
        driver = BuildDriver(settings)
        handler = CollectingHandler()
        result = driver.run(
            BuildRequest(
                project_dir=args.project_dir,
                extra_args=tuple(args.cargo_args),
                target_mode=TargetMode.SIMULATOR,
                handler=handler,
            )
        )

        if not result.success:
            ErrorFormatter.print_error("Build failed!", f"cargo exited with status {result.returncode}")
            sys.exit(1)

        wasm_path = handler.last
        if wasm_path is None:
            ErrorFormatter.fatal("v5build simulate may not run libraries")

        simulator = Simulator(settings.simulator)
        simulator.simulate(wasm_path, jsonl_writer(sys.stdout))
        sys.exit(0)

    except ToolchainNotReadyError as e:
        ErrorFormatter.fatal(str(e), e.hint)
    except ToolNotFoundError as e:
        ErrorFormatter.handle_tool_not_found(e)
    except SimulatorError as e:
        ErrorFormatter.print_error("Simulation failed!", str(e))
        sys.exit(1)
    except KeyboardInterrupt:
        ErrorFormatter.handle_keyboard_interrupt()
    except Exception as e:
        ErrorFormatter.handle_unexpected_error(e, args.verbose)


def new_command(args: NewArgs) -> None:
    """Create a new project from the vexide template.

    Examples:
        v5build new my-robot                 # Create ./my-robot
        v5build --path robots new my-robot   # Create robots/my-robot
        v5build new                          # Use the current (empty) directory
        v5build new my-robot --offline       # Use the cached template, no network
    """
    settings = Settings.from_env()

    try:
        resolver = create_resolver(settings)
        project_dir = new_project(
            path=args.path,
            name=args.name,
            resolver=resolver,
            download=not args.offline,
        )
        ErrorFormatter.print_success(f"Created new project at {project_dir}")
        sys.exit(0)

    except ProjectDirFullError as e:
        ErrorFormatter.print_error(
            "Project directory is not empty!",
            f"{e.project_dir} already contains files. Choose an empty or new directory.",
        )
        sys.exit(1)
    except ScaffoldError as e:
        ErrorFormatter.print_error("Failed to create project!", str(e))
        sys.exit(1)
    except PermissionError as e:
        ErrorFormatter.handle_permission_error(e)
    except KeyboardInterrupt:
        ErrorFormatter.handle_keyboard_interrupt()
    except Exception as e:
        ErrorFormatter.handle_unexpected_error(e, args.verbose)


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser (passthrough arguments are split off beforehand)."""
    parser = argparse.ArgumentParser(
        prog="v5build",
        description="v5build - Build and manage vexide/pros-rs robot projects",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"v5build {__version__}",
    )
    parser.add_argument(
        "--path",
        type=Path,
        default=Path("."),
        help="Project directory (default: current directory)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show verbose output",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # Build command
    build_parser = subparsers.add_parser(
        "build",
        help="Build the project (arguments after -- go to cargo)",
    )
    build_parser.add_argument(
        "-s",
        "--simulator",
        action="store_true",
        help="Build for the simulator instead of the V5 brain",
    )

    # Simulate command
    subparsers.add_parser(
        "simulate",
        help="Build for and run the simulator (arguments after -- go to cargo)",
    )

    # New command
    new_parser = subparsers.add_parser(
        "new",
        help="Create a new project from the vexide template",
    )
    new_parser.add_argument(
        "name",
        nargs="?",
        default=None,
        help="Project name (default: name of the --path directory)",
    )
    new_parser.add_argument(
        "--offline",
        action="store_true",
        help="Use the cached template (or the builtin one) without checking for updates",
    )

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """v5build - Build and manage vexide/pros-rs robot projects."""
    if argv is None:
        argv = sys.argv[1:]

    if argv and argv[0] == CARGO_SUBCOMMAND:
        argv = argv[1:]

    own_args, cargo_args = split_passthrough(argv)

    parser = create_parser()
    parsed_args = parser.parse_args(own_args)

    # If no command specified, show help
    if not parsed_args.command:
        parser.print_help()
        sys.exit(0)

    setup_logging(parsed_args.verbose)

    if parsed_args.command in ("build", "simulate"):
        PathValidator.validate_project_dir(parsed_args.path)

    # Execute command
    if parsed_args.command == "build":
        build_command(
            BuildArgs(
                project_dir=parsed_args.path,
                simulator=parsed_args.simulator,
                cargo_args=cargo_args,
                verbose=parsed_args.verbose,
            )
        )
    elif parsed_args.command == "simulate":
        simulate_command(
            SimulateArgs(
                project_dir=parsed_args.path,
                cargo_args=cargo_args,
                verbose=parsed_args.verbose,
            )
        )
    elif parsed_args.command == "new":
        if cargo_args:
            parser.error("new does not accept passthrough arguments")
        new_command(
            NewArgs(
                path=parsed_args.path,
                name=parsed_args.name,
                offline=parsed_args.offline,
                verbose=parsed_args.verbose,
            )
        )


if __name__ == "__main__":
    main()
