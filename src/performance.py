"""
Timing and logging utilities for upstream calls.
"""
import time
from datetime import datetime, timezone


class PerformanceTimer:
    """Context manager for timing an upstream call."""

    def __init__(self, operation_name: str, log_func=print):
        self.operation_name = operation_name
        self.log = log_func
        self.start_time = None
        self.duration = None

    def __enter__(self):
        self.start_time = time.time()
        self.log(f"START: {self.operation_name}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.duration = time.time() - self.start_time

        if exc_type is None:
            self.log(f"COMPLETE: {self.operation_name} ({self.duration:.3f}s)")
        else:
            self.log(f"FAILED: {self.operation_name} ({self.duration:.3f}s) - {exc_val}", "ERROR")

        return False  # Don't suppress exceptions


def create_logger(prefix: str = ""):
    """Create a logger function with timestamp and prefix."""
    def log(message: str, level: str = "INFO"):
        timestamp = datetime.now(timezone.utc).strftime('%Y-%m-%dT%H:%M:%S.%f')[:-3] + 'Z'
        full_prefix = f"[{timestamp}] [{level}]"
        if prefix:
            full_prefix += f" [{prefix}]"
        print(f"{full_prefix} {message}", flush=True)
    return log
