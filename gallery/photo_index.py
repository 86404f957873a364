"""
PhotoIndex - In-memory index of the photos found under a root directory.
"""

import logging
import math
import os
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Iterator, List, Optional, Tuple

from PIL import Image

from .identifiers import new_id
from .photo_record import PhotoRecord
from .scan_progress import ScanProgress

IMAGE_EXTENSIONS = {'.jpg', '.jpeg', '.png', '.gif'}


class StorageUnavailableError(Exception):
    """Raised when the photo root or thumbnail directory cannot be used."""
    pass


def iter_image_files(root: str) -> Iterator[str]:
    """Yield absolute paths of image files below root, in sorted order."""
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames.sort()
        for filename in sorted(filenames):
            if os.path.splitext(filename)[1].lower() in IMAGE_EXTENSIONS:
                path = os.path.join(dirpath, filename)
                if os.path.isfile(path):
                    yield os.path.abspath(path)


def read_dimensions(path: str) -> Tuple[int, int]:
    """Read width and height from the image header."""
    with Image.open(path) as img:
        return img.width, img.height


class PhotoIndex:
    """
    Mapping of photo id to PhotoRecord.
    
    Built once by build() and never re-scanned. Ids iterate in the sorted
    order of their source paths for the lifetime of the index.
    """
    
    def __init__(self, records: Optional[List[PhotoRecord]] = None):
        self._records: Dict[str, PhotoRecord] = {}
        self._ids: List[str] = []
        self.skipped: List[str] = []
        for record in records or []:
            self.add(record)
    
    @classmethod
    def build(
        cls,
        root_dir: str,
        workers: int = 8,
        progress: Optional[ScanProgress] = None,
        logger: Optional[logging.Logger] = None
    ) -> 'PhotoIndex':
        """
        Scan root_dir recursively and index every readable image.
        
        Args:
            root_dir: Directory holding the originals
            workers: Threads used to probe files
            progress: Optional progress tracker for callbacks
            logger: Optional logger instance
            
        Returns:
            Populated PhotoIndex
            
        Raises:
            StorageUnavailableError: root_dir is missing or not a directory
        """
        logger = logger or logging.getLogger(__name__)
        root_dir = os.path.abspath(root_dir)
        if not os.path.isdir(root_dir):
            raise StorageUnavailableError(f"Photo root is not a directory: {root_dir}")
        
        start_time = time.time()
        logger.info(f"Scanning {root_dir}")
        paths = list(iter_image_files(root_dir))
        
        index = cls()
        with ThreadPoolExecutor(max_workers=max(1, workers)) as pool:
            # map() preserves input order, so insertion order follows the sorted paths
            for path, result in zip(paths, pool.map(cls._probe, paths)):
                if isinstance(result, Exception):
                    logger.warning(f"Skipping unreadable image {path}: {result}")
                    index.skipped.append(path)
                    if progress:
                        progress.on_file_skipped(path, result)
                    continue
                index.add(result)
                if progress:
                    progress.on_file_indexed(result)
        
        logger.info(
            f"Index built: {len(index)} photos, {len(index.skipped)} skipped "
            f"({time.time() - start_time:.1f}s)"
        )
        return index
    
    @staticmethod
    def _probe(path: str):
        """Build a record for path, or return the exception that prevented it."""
        try:
            width, height = read_dimensions(path)
            size = os.stat(path).st_size
        except (OSError, ValueError, Image.DecompressionBombError) as e:
            return e
        return PhotoRecord(
            id=new_id(),
            source_path=path,
            width=width,
            height=height,
            size_on_disk=size,
        )
    
    def add(self, record: PhotoRecord) -> None:
        if record.id in self._records:
            raise ValueError(f"Duplicate photo id: {record.id}")
        self._records[record.id] = record
        self._ids.append(record.id)
    
    def get(self, photo_id: str) -> Optional[PhotoRecord]:
        """Exact lookup; None if the id is unknown."""
        return self._records.get(photo_id)
    
    def __getitem__(self, photo_id: str) -> PhotoRecord:
        return self._records[photo_id]
    
    def __contains__(self, photo_id) -> bool:
        return photo_id in self._records
    
    def __len__(self) -> int:
        return len(self._records)
    
    def __iter__(self) -> Iterator[PhotoRecord]:
        return iter(self._records.values())
    
    @property
    def total_bytes(self) -> int:
        return sum(record.size_on_disk for record in self)
    
    def list_ids(self, offset: int = 0, limit: int = 10) -> List[str]:
        """Ids from offset, at most limit of them; empty past the end."""
        if offset < 0 or limit < 0:
            raise ValueError("offset and limit must be non-negative")
        return self._ids[offset:offset + limit]
    
    def page(self, offset: int = 0, limit: int = 10) -> dict:
        """
        Paginated listing as served by /photos.
        
        Returns:
            Dict with photos (ids), pages and currentPage
        """
        if limit <= 0:
            raise ValueError("limit must be positive")
        return {
            'photos': self.list_ids(offset, limit),
            'pages': math.ceil(len(self) / limit),
            'currentPage': offset // limit,
        }
