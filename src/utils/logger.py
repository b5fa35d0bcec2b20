"""
Simulation Logger

This module provides logging utilities for the simulation,
with configurable verbosity levels, entity categories and
simulated-time stamps.
"""

from typing import Optional, TextIO
from datetime import datetime
from enum import IntEnum
import os

from config import DEFAULT_LOG_LEVEL


class LogLevel(IntEnum):
    """Log level enumeration."""
    DEBUG = 0
    INFO = 1
    WARNING = 2
    ERROR = 3
    CRITICAL = 4


class SimulationLogger:
    """
    Logger for simulation events.

    Provides structured logging with timestamps and categories.
    The emulator sets the simulated time before every event so that
    entity messages line up with the event trace.

    Attributes:
        name: Logger name
        level: Minimum log level
        file: Optional file for logging
    """

    # Color codes for terminal output
    COLORS = {
        LogLevel.DEBUG: '\033[36m',     # Cyan
        LogLevel.INFO: '\033[32m',      # Green
        LogLevel.WARNING: '\033[33m',   # Yellow
        LogLevel.ERROR: '\033[31m',     # Red
        LogLevel.CRITICAL: '\033[35m',  # Magenta
    }
    RESET = '\033[0m'

    def __init__(
        self,
        name: str = "Simulator",
        level: int = DEFAULT_LOG_LEVEL,
        log_file: Optional[str] = None,
        use_colors: bool = True,
        include_timestamp: bool = True
    ):
        """
        Initialize logger.

        Args:
            name: Logger name
            level: Minimum log level
            log_file: Optional file path for logging
            use_colors: Use ANSI colors in output
            include_timestamp: Include timestamps in log messages
        """
        self.name = name
        self.level = level
        self.use_colors = use_colors
        self.include_timestamp = include_timestamp

        self.file: Optional[TextIO] = None
        if log_file:
            log_dir = os.path.dirname(log_file)
            if log_dir:
                os.makedirs(log_dir, exist_ok=True)
            self.file = open(log_file, 'w')

        # Simulation time tracking
        self.sim_time: Optional[float] = None

        # Message counts
        self.message_counts = {level: 0 for level in LogLevel}

    def set_sim_time(self, time: float):
        """Set current simulation time for log messages."""
        self.sim_time = time

    def set_level(self, level: int):
        """Set minimum log level."""
        self.level = level

    def _format_message(
        self,
        level: LogLevel,
        message: str,
        category: Optional[str] = None
    ) -> str:
        """Format a log message."""
        parts = []

        if self.include_timestamp:
            if self.sim_time is not None:
                parts.append(f"[{self.sim_time:10.4f}]")
            else:
                parts.append(f"[{datetime.now().strftime('%H:%M:%S.%f')[:-3]}]")

        level_str = level.name.ljust(8)
        if self.use_colors:
            level_str = f"{self.COLORS[level]}{level_str}{self.RESET}"
        parts.append(level_str)

        parts.append(f"[{self.name}]")

        if category:
            parts.append(f"[{category}]")

        parts.append(message)

        return " ".join(parts)

    def _log(
        self,
        level: LogLevel,
        message: str,
        category: Optional[str] = None
    ):
        """Log a message."""
        if level < self.level:
            return

        self.message_counts[level] += 1
        formatted = self._format_message(level, message, category)

        print(formatted)

        if self.file:
            # Strip color codes for file
            clean = formatted
            for color in self.COLORS.values():
                clean = clean.replace(color, '')
            clean = clean.replace(self.RESET, '')
            self.file.write(clean + '\n')
            self.file.flush()

    def debug(self, message: str, category: Optional[str] = None):
        """Log debug message."""
        self._log(LogLevel.DEBUG, message, category)

    def info(self, message: str, category: Optional[str] = None):
        """Log info message."""
        self._log(LogLevel.INFO, message, category)

    def warning(self, message: str, category: Optional[str] = None):
        """Log warning message."""
        self._log(LogLevel.WARNING, message, category)

    def error(self, message: str, category: Optional[str] = None):
        """Log error message."""
        self._log(LogLevel.ERROR, message, category)

    def critical(self, message: str, category: Optional[str] = None):
        """Log critical message."""
        self._log(LogLevel.CRITICAL, message, category)

    # Convenience methods for protocol events
    def packet_sent(self, entity: str, seqnum: int):
        """Log data packet handed to the channel."""
        self.info(f"Sending packet {seqnum} to layer 3", entity)

    def window_full(self, entity: str):
        """Log a refused message."""
        self.info("New message arrives, send window is full", entity)

    def ack_received(self, entity: str, acknum: int):
        """Log a new (non-duplicate) ACK."""
        self.info(f"Uncorrupted ACK {acknum} is received", entity)

    def ack_sent(self, entity: str, acknum: int):
        """Log ACK handed to the channel."""
        self.debug(f"Sending ACK {acknum} to layer 3", entity)

    def corrupted(self, entity: str, what: str):
        """Log a corrupted packet."""
        self.info(f"Corrupted {what} received", entity)

    def timeout(self, entity: str, seqnum: int):
        """Log timer expiry."""
        self.warning(f"Time out, resending packet {seqnum}", entity)

    def delivered(self, entity: str, seqnum: int):
        """Log in-order delivery to layer 5."""
        self.debug(f"Delivering packet {seqnum} to layer 5", entity)

    def window_update(self, entity: str, base: int, nextseqnum: int):
        """Log window update."""
        self.debug(f"Window: base={base}, next={nextseqnum}", entity)

    def channel_event(self, event: str, packet):
        """Log channel loss/corruption."""
        self.debug(f"{event}: {packet}", "CHANNEL")

    def simulation_start(self, params: dict):
        """Log simulation start."""
        param_str = ", ".join(f"{k}={v}" for k, v in params.items())
        self.info(f"Simulation started: {param_str}", "SIM")

    def simulation_end(self, summary: dict):
        """Log simulation end."""
        self.info(
            f"Simulation ended: delivered={summary.get('messages_delivered', 0)}, "
            f"timeouts={summary.get('timer_interrupts', 0)}",
            "SIM"
        )

    def get_summary(self) -> dict:
        """Get logging summary."""
        return {
            'message_counts': dict(self.message_counts),
            'total_messages': sum(self.message_counts.values())
        }

    def close(self):
        """Close log file if open."""
        if self.file:
            self.file.close()
            self.file = None

    def __del__(self):
        """Cleanup on deletion."""
        self.close()


# Global logger instance
_global_logger: Optional[SimulationLogger] = None


def get_logger() -> SimulationLogger:
    """Get global logger instance."""
    global _global_logger
    if _global_logger is None:
        _global_logger = SimulationLogger()
    return _global_logger


def set_logger(logger: SimulationLogger):
    """Set global logger instance."""
    global _global_logger
    _global_logger = logger
