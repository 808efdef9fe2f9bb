#!/usr/bin/env python3
"""
GPadder Arbiter Demo

Plays a short scripted session on the virtual driver:
- Default selection with two pads attached
- Unplugging the active pad and recovering through a rescan
- Auto-switching to whichever device receives input
- A timed rumble that stops by itself

Usage:
    python examples/arbiter_demo.py [--hardware]

With --hardware the same arbiter runs on pygame and prints events for
ten seconds instead of following the script.
"""

import sys
import time
import argparse
from pathlib import Path

# Add the project root to the path
sys.path.insert(0, str(Path(__file__).parent.parent))

from gpadder.input import (
    InputArbiter, VirtualDriver, ArbiterEvent, GenericState, StructuredState,
    StructuredButton,
)
from gpadder.core.logging import configure_logging, get_logger


FRAME = 1.0 / 60.0


class ArbiterDemo:
    """Scripted walk through the arbiter's behaviour."""

    def __init__(self, arbiter: InputArbiter, driver: VirtualDriver):
        self.logger = get_logger("arbiter_demo")
        self.arbiter = arbiter
        self.driver = driver
        self.event_count = 0

        arbiter.subscribe_all(self.on_event)

    def on_event(self, event: ArbiterEvent) -> None:
        self.event_count += 1
        print(f"  [event] {event.event_type.value:<18} index={event.index} "
              f"({self.arbiter.device_name(event.index)})")

    def run_frames(self, seconds: float) -> None:
        for _ in range(int(seconds / FRAME)):
            self.arbiter.tick(FRAME)

    def step(self, title: str) -> None:
        print(f"\n{title}")
        print("-" * len(title))

    def run(self) -> None:
        self.step("1. Default selection")
        print(f"  Active device: {self.arbiter.selected_index()} "
              f"({self.arbiter.device_name(self.arbiter.selected_index())})")
        print(f"  Connected: {list(self.arbiter.connected_devices())}")

        self.step("2. Unplug the active pad")
        self.driver.disconnect(0)
        self.run_frames(3.5)
        print(f"  Active device after rescan: {self.arbiter.selected_index()}")

        self.step("3. Auto-switch")
        self.driver.connect_gamepad(0, name="Player One Pad")
        self.arbiter.set_auto_switch(True)
        self.driver.set_structured(0, StructuredState(connected=True, buttons={StructuredButton.A}))
        self.run_frames(0.1)
        self.driver.set_structured(0, StructuredState(connected=True))
        self.driver.set_generic(2, GenericState(connected=True, buttons=(0,) * 8, axes=(0.9, 0.0)))
        self.run_frames(0.1)
        print(f"  Active device: {self.arbiter.selected_index()}")

        self.step("4. Timed rumble")
        self.driver.set_generic(2, GenericState(connected=True, buttons=(0,) * 8, axes=(0.0, 0.0)))
        self.arbiter.select_device(0)
        self.arbiter.trigger_rumble(0.8, 0.4, 0.25)
        print(f"  Motors now: {self.driver.motors(0)}")
        time.sleep(0.4)
        print(f"  Motors after 0.4s: {self.driver.motors(0)}")

        print(f"\nDemo finished, {self.event_count} events delivered.")


def run_hardware(duration: float) -> int:
    from gpadder.input.pygame_driver import PygameDriver

    with InputArbiter(PygameDriver(), settings=None) as arbiter:
        arbiter.subscribe_all(lambda event: print(
            f"{event.event_type.value:<18} {event.index}: {arbiter.device_name(event.index)}"
        ))
        print(f"Watching {arbiter.scan_width} indices for {duration:.0f}s, "
              f"active: {arbiter.selected_index()}")

        end = time.monotonic() + duration
        last = time.monotonic()
        while time.monotonic() < end:
            now = time.monotonic()
            arbiter.tick(now - last)
            last = now
            time.sleep(FRAME)
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(description="GPadder Arbiter Demo")
    parser.add_argument("--hardware", action="store_true",
                        help="Use connected controllers through pygame")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    configure_logging(log_level="DEBUG" if args.debug else "WARNING", file_output=False)

    if args.hardware:
        return run_hardware(10.0)

    driver = VirtualDriver()
    driver.connect_gamepad(0, name="Player One Pad")
    driver.connect_joystick(2, name="Flight Stick", buttons=8, axes=2)

    with InputArbiter(driver) as arbiter:
        ArbiterDemo(arbiter, driver).run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
