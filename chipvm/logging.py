"""Console logging utilities for chipvm.

A small level-filtered console logger with optional colours and elapsed-time
stamps, plus an emulator-specific subclass used by the host-facing functions in
``chipvm.emulator``. The shared instance is configured from the
``CHIPVM_LOG_LEVEL`` environment variable.
"""

import os
import sys
import time
from typing import Optional

LOG_LEVEL_ENV = "CHIPVM_LOG_LEVEL"
DEFAULT_LOG_LEVEL = "WARNING"


class ConsoleLogger:
    """Flexible console logger with level filtering and formatters."""

    def __init__(
        self,
        name: str = "chipvm",
        log_level: str = "INFO",
        use_colors: bool = True,
        show_timestamps: bool = True,
    ):
        self.name = name
        self.log_level = log_level.upper()
        self.use_colors = (
            use_colors and hasattr(sys.stdout, "isatty") and sys.stdout.isatty()
        )
        self.show_timestamps = show_timestamps
        self.start_time = time.time()

        self.colors = (
            {
                "DEBUG": "\033[36m",
                "INFO": "\033[32m",
                "WARNING": "\033[33m",
                "ERROR": "\033[31m",
                "CRITICAL": "\033[35m",
                "RESET": "\033[0m"
            }
            if self.use_colors
            else {
                k: ""
                for k in ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL", "RESET"]
            }
        )

        self.level_order = {
            "DEBUG": 0,
            "INFO": 1,
            "WARNING": 2,
            "ERROR": 3,
            "CRITICAL": 4,
        }

    def _should_log(self, level: str) -> bool:
        """Check if message should be logged based on current log level."""
        return self.level_order.get(level.upper(), 1) >= self.level_order.get(
            self.log_level, 1
        )

    def _format_message(self, level: str, message: str) -> str:
        """Format log message with timestamp, level, and colors."""
        timestamp = (
            f"[{time.time() - self.start_time:8.2f}s]" if self.show_timestamps else ""
        )
        level_str = f"[{level:>8s}]"
        name_str = f"[{self.name}]"

        if self.use_colors:
            color = self.colors.get(level.upper(), "")
            reset = self.colors["RESET"]
            level_str = f"{color}{level_str}{reset}"

        return f"{timestamp}{level_str}{name_str} {message}"

    def log(self, level: str, message: str):
        """Log a message at the specified level."""
        if self._should_log(level):
            formatted = self._format_message(level, message)
            print(formatted, flush=True)

    def debug(self, message: str):
        self.log("DEBUG", message)

    def info(self, message: str):
        self.log("INFO", message)

    def warning(self, message: str):
        self.log("WARNING", message)

    def error(self, message: str):
        self.log("ERROR", message)

    def critical(self, message: str):
        self.log("CRITICAL", message)


class EmulatorLogger(ConsoleLogger):
    """Logger for emulator lifecycle events and state dumps."""

    def __init__(self, name: str = "chipvm", **kwargs):
        super().__init__(name, **kwargs)

    def log_rom_loaded(self, size: int):
        self.info(f"Loaded ROM: {size} bytes at 0x200")

    def log_reset(self):
        self.info("Reset to cached ROM")

    def log_fault(self, error: Exception):
        self.error(str(error))

    def log_state(self, state, level: str = "DEBUG"):
        """Dump program counter, index, timers, stack and registers."""
        if not self._should_log(level):
            return
        self.log(
            level,
            f"PC: 0x{int(state.pc):03X}  I: 0x{int(state.I):03X}  "
            f"DT: {int(state.delay_timer)}  ST: {int(state.sound_timer)}  "
            f"SP: {int(state.stack.pointer)}",
        )
        for row in range(0, 16, 4):
            registers = " ".join(
                f"V{reg:X}:{int(state.V[reg]):02X}" for reg in range(row, row + 4)
            )
            self.log(level, f"  {registers}")


_logger: Optional[EmulatorLogger] = None


def get_logger() -> EmulatorLogger:
    """Shared emulator logger, created on first use."""
    global _logger
    if _logger is None:
        _logger = EmulatorLogger(
            log_level=os.environ.get(LOG_LEVEL_ENV, DEFAULT_LOG_LEVEL)
        )
    return _logger


def set_log_level(level: str):
    get_logger().log_level = level.upper()
