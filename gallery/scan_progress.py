"""
ScanProgress - Tracks and displays photo index build progress.
"""

import logging
import time
from typing import Optional

from .photo_record import PhotoRecord


class ScanProgress:
    """
    Tracks and displays scan progress with optional per-file output.
    """
    
    def __init__(
        self,
        show_files: bool = False,
        log_interval: int = 500,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize progress tracker.
        
        Args:
            show_files: If True, print each file as it's indexed
            log_interval: Log summary progress every N files (when not show_files)
            logger: Optional logger instance
        """
        self.show_files = show_files
        self.log_interval = log_interval
        self.logger = logger or logging.getLogger(__name__)
        self.indexed = 0
        self.skipped = 0
        self.start_time: Optional[float] = None
    
    def _tick(self) -> None:
        if self.start_time is None:
            self.start_time = time.time()
        total = self.indexed + self.skipped
        if not self.show_files and total % self.log_interval == 0:
            elapsed = time.time() - self.start_time
            rate = total / elapsed if elapsed > 0 else 0
            self.logger.info(f"  Progress: {total:,} files ({rate:.0f}/sec)")
    
    def on_file_indexed(self, record: PhotoRecord) -> None:
        """Called when a file has been added to the index."""
        self.indexed += 1
        if self.show_files:
            print(f"  {record.format_status()}")
        self._tick()
    
    def on_file_skipped(self, path: str, error: Exception) -> None:
        """Called when a file could not be probed."""
        self.skipped += 1
        if self.show_files:
            print(f"  {path} - SKIPPED ({error})")
        self._tick()
    
    def __call__(self, record: PhotoRecord) -> None:
        """Allow use as callback."""
        self.on_file_indexed(record)
