"""Console output formatting utilities for gatewayci."""

from __future__ import annotations

import sys
import threading
from typing import Optional


class Console:
    """Centralized console output formatting."""

    def __init__(self, debug: bool = False):
        """
        Initialize console formatter.

        Args:
            debug: If True, show detailed output including stack traces
        """
        self.debug = debug
        # jobs in a concurrent group report from worker threads
        self._lock = threading.Lock()

    def _print(self, *lines: str, err: bool = False) -> None:
        stream = sys.stderr if err else sys.stdout
        with self._lock:
            for line in lines:
                print(line, file=stream)

    def print_event_received(
        self,
        source: str,
        event_type: str,
        ref: Optional[str],
    ) -> None:
        """Print event header."""
        self._print(
            "",
            "EVENT RECEIVED",
            f"Source: {source}",
            f"Type: {event_type}",
            f"Ref: {ref or '(none)'}",
            "",
        )

    def print_phase(self, index: int, jobs: list[str]) -> None:
        """Print the start of a serial phase."""
        self._print(f"=== Phase {index}: {', '.join(jobs)} ===")

    def print_job_start(self, name: str, image: str) -> None:
        self._print(f"JOB STARTED: {name} ({image})")

    def print_job_output(self, name: str, output: str) -> None:
        """Print captured job output, one prefixed line per output line."""
        if not output:
            return
        self._print(*(f"[{name}] {line}" for line in output.splitlines()))

    def print_results(self, results: dict[str, str]) -> None:
        """Print final results summary."""
        lines = ["", "=" * 40, "RESULTS", "=" * 40]
        if not results:
            lines.append("  (no jobs run)")
        for job, status in results.items():
            status_display = status.upper() if status != "ok" else "SUCCESS"
            lines.append(f"  {job}: {status_display}")
        self._print(*lines)

    def print_error(
        self,
        title: str,
        message: str,
        details: Optional[list[str]] = None,
        suggestion: Optional[str] = None,
    ) -> None:
        """
        Print structured error message.

        Args:
            title: Error title
            message: Main error message
            details: Optional list of detail lines
            suggestion: Optional suggestion for user
        """
        lines = ["", f"ERROR: {title}", message]
        if details:
            lines.extend(f"  {detail}" for detail in details)
        if suggestion:
            lines.extend(["", suggestion])
        self._print(*lines, err=True)

    def print_exception(self, exc: BaseException) -> None:
        """Print exception, with full traceback only in debug mode."""
        if self.debug:
            import traceback
            with self._lock:
                traceback.print_exception(type(exc), exc, exc.__traceback__)
        else:
            self._print(f"Error: {exc}", err=True)

    def print_info(self, message: str) -> None:
        """Print informational message."""
        self._print(message)

    def print_debug(self, message: str) -> None:
        """Print debug message (only if debug mode enabled)."""
        if self.debug:
            self._print(f"[DEBUG] {message}", err=True)


# Global console instance (will be initialized by CLI)
_console: Optional[Console] = None


def get_console() -> Console:
    """Get the global console instance."""
    global _console
    if _console is None:
        _console = Console()
    return _console


def set_console(console: Console) -> None:
    """Set the global console instance."""
    global _console
    _console = console
