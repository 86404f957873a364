"""
ThumbnailResolver - Decides which file answers a thumbnail request.
"""

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Optional

from .identifiers import new_id
from .photo_index import StorageUnavailableError
from .photo_record import PhotoRecord
from .resizers import AUTO, ResizeError, Resizer


class ThumbnailResolver:
    """
    Resolves a photo and target dimension to a thumbnail file path.
    
    The first successful resolve fixes record.thumbnail_path for every later
    request on that record, whatever dimension they ask for. Generation is
    single-flight per record: concurrent first requests wait on the record
    lock and reuse the winner's result.
    """
    
    def __init__(
        self,
        resizer: Resizer,
        thumb_dir: str,
        timeout: float = 30,
        workers: int = 4,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize resolver.
        
        Args:
            resizer: Engine used on cache misses
            thumb_dir: Directory for generated thumbnails, created if missing
            timeout: Seconds to wait for a single resize
            workers: Maximum resizes running at once
            logger: Optional logger instance
            
        Raises:
            StorageUnavailableError: thumb_dir cannot be created or written
        """
        self.resizer = resizer
        self.thumb_dir = os.path.abspath(thumb_dir)
        self.timeout = timeout
        self.logger = logger or logging.getLogger(__name__)
        self._ensure_thumb_dir()
        self._pool = ThreadPoolExecutor(max_workers=max(1, workers), thread_name_prefix='resize')
    
    def _ensure_thumb_dir(self) -> None:
        try:
            os.makedirs(self.thumb_dir, exist_ok=True)
        except OSError as e:
            raise StorageUnavailableError(f"Cannot create thumbnail directory {self.thumb_dir}: {e}") from e
        if not os.access(self.thumb_dir, os.W_OK | os.X_OK):
            raise StorageUnavailableError(f"Thumbnail directory is not writable: {self.thumb_dir}")
    
    def resolve(self, record: PhotoRecord, size: int) -> str:
        """
        Return the thumbnail path for record, generating it if needed.
        
        Args:
            record: Photo to thumbnail
            size: Target dimension for the longer side
            
        Returns:
            Path of the file to serve
            
        Raises:
            ResizeError: generation failed; the record is left unchanged
        """
        if record.thumbnail_path:
            return record.thumbnail_path
        
        with record.lock:
            if record.thumbnail_path:
                self.logger.debug(f"{record.id}: thumbnail produced by a concurrent request")
                return record.thumbnail_path
            
            if record.fits_within(size):
                self.logger.debug(f"{record.id}: sending original image as thumb")
                record.thumbnail_path = record.source_path
                return record.thumbnail_path
            
            output_path = os.path.join(self.thumb_dir, f"{new_id()}.jpg")
            self.logger.debug(f"{record.id}: scaling {record.width}x{record.height} to {size} with {self.resizer.name}")
            self._generate(record, output_path, size)
            record.is_generated_thumbnail = True
            record.thumbnail_path = output_path
            return record.thumbnail_path
    
    def _generate(self, record: PhotoRecord, output_path: str, size: int) -> None:
        if record.width > record.height:
            width, height = size, AUTO
        else:
            width, height = AUTO, size
        
        future = self._pool.submit(self.resizer.scale, record.source_path, output_path, width, height)
        try:
            future.result(timeout=self.timeout)
        except FutureTimeoutError as e:
            future.cancel()
            self.logger.error(f"{record.id}: resize timed out after {self.timeout}s")
            raise ResizeError(f"Resize of {record.source_path} timed out") from e
    
    def shutdown(self) -> None:
        """Stop the resize pool, waiting for running resizes."""
        self._pool.shutdown(wait=True)
