"""
Command line entry point for GPadder.

Lists controllers, monitors arbitration events live, or fires a test
rumble on the selected device.
"""

import sys
import time
import argparse
from pathlib import Path
from typing import List, Optional, Tuple

from . import __version__
from .config import get_config, get_settings
from .core.logging import configure_logging, get_logger, shutdown_logging
from .core.exceptions import GPadderError, setup_exception_handling, handle_error
from .input import (
    InputArbiter, ArbiterEvent, DeviceFamily, get_input_arbiter, reset_input_arbiter,
)


def setup_argument_parser() -> argparse.ArgumentParser:
    """
    Set up command line argument parser.

    Returns:
        Configured ArgumentParser instance
    """
    parser = argparse.ArgumentParser(
        prog="gpadder",
        description="GPadder - controller input arbitration",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  gpadder --list-devices              # List connected controllers
  gpadder --monitor --auto-switch     # Follow whichever pad is used
  gpadder --device 1 --rumble 0.5,0.5,0.5
        """
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"GPadder {__version__}"
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug mode with verbose logging"
    )

    parser.add_argument(
        "--config",
        type=str,
        metavar="FILE",
        help="Path to configuration file"
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=None,
        help="Set logging level (overrides config)"
    )

    # Arbitration options
    parser.add_argument(
        "--scan-width",
        type=int,
        metavar="N",
        help="Number of device indices to scan"
    )

    parser.add_argument(
        "--auto-switch",
        action="store_true",
        help="Switch to whichever device receives input"
    )

    parser.add_argument(
        "--device",
        type=int,
        metavar="INDEX",
        help="Select this device index before running the action"
    )

    parser.add_argument(
        "--diagnostic-log",
        type=str,
        metavar="FILE",
        help="Append every arbiter event to this file"
    )

    # Actions
    actions = parser.add_mutually_exclusive_group()
    actions.add_argument(
        "--list-devices",
        action="store_true",
        help="List connected devices and exit"
    )

    actions.add_argument(
        "--monitor",
        action="store_true",
        help="Print arbiter events until interrupted"
    )

    actions.add_argument(
        "--rumble",
        type=str,
        metavar="LEFT,RIGHT,SECONDS",
        help="Rumble the selected device and exit"
    )

    return parser


def parse_rumble(value: str) -> Tuple[float, float, float]:
    """
    Parse a rumble specification.

    Args:
        value: String in format "LEFT,RIGHT,SECONDS"

    Returns:
        Tuple of (left, right, seconds)

    Raises:
        ValueError: If format is invalid
    """
    try:
        left_str, right_str, seconds_str = value.split(',')
        left, right, seconds = float(left_str), float(right_str), float(seconds_str)
    except ValueError as e:
        raise ValueError(f"Invalid rumble '{value}'. Use LEFT,RIGHT,SECONDS (e.g., 0.5,0.5,1)") from e

    if not (0.0 <= left <= 1.0 and 0.0 <= right <= 1.0):
        raise ValueError("Motor speeds must be between 0.0 and 1.0")
    if seconds <= 0:
        raise ValueError("Rumble duration must be positive")

    return left, right, seconds


def apply_command_line_overrides(args: argparse.Namespace) -> None:
    """
    Apply command line argument overrides to configuration.

    Args:
        args: Parsed command line arguments
    """
    config = get_config()

    if args.debug:
        config.set("app.debug", True)
        config.set("app.log_level", "DEBUG")

    if args.log_level:
        config.set("app.log_level", args.log_level)

    if args.scan_width is not None:
        config.set("input.scan_width", args.scan_width)

    if args.auto_switch:
        config.set("input.auto_switch", True)

    if args.diagnostic_log:
        config.set("input.diagnostic_log", args.diagnostic_log)


def describe_families(arbiter: InputArbiter, index: int) -> str:
    """Comma separated list of the families present at ``index``."""
    info = arbiter.driver.capabilities(index)
    families = [family.value for family in DeviceFamily if info.family_info(family).connected]
    return ", ".join(families) if families else "none"


def list_devices(arbiter: InputArbiter) -> List[int]:
    """Print connected devices and return their indices."""
    indices = list(arbiter.connected_devices())
    print(f"Found {len(indices)} device(s) in indices 0-{arbiter.scan_width - 1}:")

    if not indices:
        print("  No controllers detected. Make sure your controller is connected.")

    for index in indices:
        marker = "*" if index == arbiter.selected_index() else " "
        print(f" {marker}{index}: {arbiter.device_name(index)} [{describe_families(arbiter, index)}]")

    return indices


def print_event(arbiter: InputArbiter, event: ArbiterEvent) -> None:
    print(f"{event.event_type.value:<18} {event.index}: {arbiter.device_name(event.index)}")


def monitor(arbiter: InputArbiter, poll_rate: int) -> None:
    """
    Run the tick loop, printing every event, until Ctrl+C.

    Args:
        arbiter: Arbiter to drive
        poll_rate: Ticks per second
    """
    arbiter.subscribe_all(lambda event: print_event(arbiter, event))

    print(f"Monitoring device {arbiter.selected_index()} "
          f"({arbiter.device_name(arbiter.selected_index())}), auto-switch "
          f"{'on' if arbiter.auto_switch_enabled else 'off'}")
    print("Press Ctrl+C to exit")
    print("-" * 50)

    frame = 1.0 / poll_rate
    last = time.monotonic()
    try:
        while True:
            now = time.monotonic()
            arbiter.tick(now - last)
            last = now

            pressed = arbiter.pressed_generic_buttons()
            status = "connected" if arbiter.is_connected() else "disconnected"
            if pressed:
                status += " | Buttons:" + ",".join(str(b) for b in pressed)
            print(f"\r{status:<60}", end="", flush=True)

            time.sleep(max(0.0, frame - (time.monotonic() - now)))
    except KeyboardInterrupt:
        print("\nMonitoring stopped.")


def run_rumble(arbiter: InputArbiter, value: str) -> int:
    left, right, seconds = parse_rumble(value)

    if not arbiter.trigger_rumble(left, right, seconds):
        print(f"Device {arbiter.selected_index()} is disconnected or cannot vibrate", file=sys.stderr)
        return 1

    print(f"Rumbling device {arbiter.selected_index()} for {seconds:.2f}s")
    time.sleep(seconds)
    return 0


def initialize_application(args: argparse.Namespace) -> bool:
    """
    Load configuration and set up logging.

    Args:
        args: Parsed command line arguments

    Returns:
        True if initialization successful, False otherwise
    """
    try:
        if args.config:
            config_path = Path(args.config)
            if not config_path.exists():
                print(f"Error: Configuration file '{args.config}' not found")
                return False

            from .config import Config, set_config
            set_config(Config(config_path))

        apply_command_line_overrides(args)

        settings = get_settings()
        configure_logging(log_level=settings.log_level)
        setup_exception_handling()

        get_logger("main").info("GPadder starting", extra={
            "version": __version__,
            "debug_mode": settings.debug_mode,
            **settings.get_input_info()
        })
        return True

    except Exception as e:
        print(f"Failed to initialize application: {e}")
        handle_error(e)
        return False


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the GPadder command line.

    Args:
        argv: Command line arguments, defaults to sys.argv

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    parser = setup_argument_parser()
    args = parser.parse_args(argv)

    if not initialize_application(args):
        return 1

    logger = get_logger("main")

    try:
        arbiter = get_input_arbiter()
        if args.device is not None:
            arbiter.select_device(args.device)

        if args.rumble:
            return run_rumble(arbiter, args.rumble)
        if args.monitor:
            monitor(arbiter, get_settings().poll_rate)
            return 0

        list_devices(arbiter)
        return 0

    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2
    except GPadderError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        handle_error(e)
        return 1
    finally:
        reset_input_arbiter()
        logger.info("GPadder exiting")
        shutdown_logging()


if __name__ == "__main__":
    sys.exit(main())
