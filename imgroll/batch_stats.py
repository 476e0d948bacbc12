"""
BatchStats - Statistics for a batch of photos processed from the CLI.
"""

import time
from dataclasses import dataclass, field
from typing import List


@dataclass
class BatchStats:
    """
    Statistics for a batch run.

    Attributes:
        total: Photos requested
        processed: Successfully processed
        errors: Failed to process
        files_written: Derived files written
        bytes_generated: Total bytes of derived files
        start_time: Start timestamp
        error_details: List of error messages
    """
    total: int = 0
    processed: int = 0
    errors: int = 0
    files_written: int = 0
    bytes_generated: int = 0
    start_time: float = field(default_factory=time.time)
    error_details: List[str] = field(default_factory=list)

    def record_success(self, files: int, size: int) -> None:
        self.processed += 1
        self.files_written += files
        self.bytes_generated += size

    def record_error(self, name: str, error: Exception) -> None:
        self.errors += 1
        self.error_details.append(f"{name}: {error}")

    @property
    def elapsed_seconds(self) -> float:
        """Elapsed time in seconds."""
        return time.time() - self.start_time

    @property
    def rate_per_second(self) -> float:
        """Processing rate in photos per second."""
        if self.elapsed_seconds > 0:
            return self.processed / self.elapsed_seconds
        return 0.0

    @property
    def completed_count(self) -> int:
        """Total completed (processed + errors)."""
        return self.processed + self.errors

    @property
    def remaining_count(self) -> int:
        """Remaining to process."""
        return self.total - self.completed_count
