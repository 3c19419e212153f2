"""
Colored logging utility with component name prefixes.

Provides consistent, colored logging across inventory, copy and scan
operations. Copy jobs and probes log from worker threads, so every line is
written under a shared lock.
"""

import sys
import threading
from colorama import Fore, Style


class ComponentLogger:
    """Logger that prefixes all output with a colored component name."""

    COLORS = [
        Fore.BLUE,
        Fore.MAGENTA,
        Fore.CYAN,
        Fore.GREEN,
        Fore.LIGHTBLUE_EX,
        Fore.LIGHTMAGENTA_EX,
        Fore.LIGHTCYAN_EX,
        Fore.LIGHTGREEN_EX,
    ]

    _color_index = 0
    _component_colors = {}
    _write_lock = threading.Lock()

    @classmethod
    def _get_color_for_component(cls, component_name: str) -> str:
        """Get a consistent color for a component name."""
        with cls._write_lock:
            if component_name not in cls._component_colors:
                cls._component_colors[component_name] = cls.COLORS[cls._color_index % len(cls.COLORS)]
                cls._color_index += 1
            return cls._component_colors[component_name]

    def __init__(self, component_name: str):
        """Initialize logger for a specific component."""
        self.component_name = component_name
        self.color = self._get_color_for_component(component_name)
        self.prefix = f"{self.color}[{component_name}]{Style.RESET_ALL} "

    def child(self, suffix: str) -> "ComponentLogger":
        """Logger for a sub-unit, e.g. ``copy`` -> ``copy:host1``."""
        return ComponentLogger(f"{self.component_name}:{suffix}")

    def log(self, message: str, file=None):
        """Log a message with the component prefix."""
        file = file or sys.stdout
        with self._write_lock:
            # Handle multi-line messages
            for line in str(message).splitlines() or [""]:
                print(f"{self.prefix}{line}", file=file, flush=True)

    def info(self, message: str):
        """Log an info message."""
        self.log(message)

    def warning(self, message: str):
        """Log a warning message."""
        self.log(f"{Fore.YELLOW}WARNING:{Style.RESET_ALL} {message}", file=sys.stderr)

    def error(self, message: str):
        """Log an error message."""
        self.log(f"{Fore.RED}ERROR:{Style.RESET_ALL} {message}", file=sys.stderr)

    def success(self, message: str):
        """Log a success message."""
        self.log(f"{Fore.GREEN}✓{Style.RESET_ALL} {message}")
