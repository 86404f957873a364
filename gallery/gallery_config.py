"""
GalleryConfig - Locations and resize options for the gallery core.
"""

import os
import tempfile
from dataclasses import dataclass, field
from typing import List

from .resizers import RESIZERS


def _default_thumb_dir() -> str:
    return os.path.join(tempfile.gettempdir(), 'gallery-thumbs')


@dataclass
class GalleryConfig:
    """
    Configuration for the photo index and thumbnail pipeline.
    
    Attributes:
        photo_root: Directory scanned for originals
        thumb_dir: Directory generated thumbnails are written to
        resizer: Resize engine name ('pillow' or 'convert')
        resize_timeout: Seconds allowed for one resize
        resize_workers: Maximum concurrent resizes
        scan_workers: Threads probing files during the index build
        jpeg_quality: Quality used by the Pillow engine
    """
    photo_root: str = './static'
    thumb_dir: str = field(default_factory=_default_thumb_dir)
    resizer: str = 'pillow'
    resize_timeout: float = 30.0
    resize_workers: int = 4
    scan_workers: int = 8
    jpeg_quality: int = 85
    
    @classmethod
    def from_env(cls) -> 'GalleryConfig':
        """Create configuration from environment variables."""
        return cls(
            photo_root=os.getenv('PHOTO_ROOT', './static'),
            thumb_dir=os.getenv('THUMB_DIR') or _default_thumb_dir(),
            resizer=os.getenv('RESIZER', 'pillow'),
            resize_timeout=float(os.getenv('RESIZE_TIMEOUT', '30')),
            resize_workers=int(os.getenv('RESIZE_WORKERS', '4')),
            scan_workers=int(os.getenv('SCAN_WORKERS', '8')),
            jpeg_quality=int(os.getenv('JPEG_QUALITY', '85')),
        )
    
    def validate(self) -> List[str]:
        """
        Validate configuration.
        
        Returns:
            List of error messages (empty if valid)
        """
        errors = []
        
        if not self.photo_root:
            errors.append("PHOTO_ROOT is required")
        elif not os.path.isdir(self.photo_root):
            errors.append(f"Photo root does not exist or is not a directory: {self.photo_root}")
        
        if not self.thumb_dir:
            errors.append("THUMB_DIR is required")
        elif os.path.exists(self.thumb_dir):
            if not os.path.isdir(self.thumb_dir):
                errors.append(f"Thumbnail directory is not a directory: {self.thumb_dir}")
            elif not os.access(self.thumb_dir, os.W_OK | os.X_OK):
                errors.append(f"Thumbnail directory is not writable: {self.thumb_dir}")
        
        if self.resizer not in RESIZERS:
            errors.append(f"Unknown resizer: {self.resizer} (expected one of {', '.join(sorted(RESIZERS))})")
        if self.resize_timeout <= 0:
            errors.append("RESIZE_TIMEOUT must be positive")
        if self.resize_workers < 1:
            errors.append("RESIZE_WORKERS must be at least 1")
        if self.scan_workers < 1:
            errors.append("SCAN_WORKERS must be at least 1")
        if not 1 <= self.jpeg_quality <= 95:
            errors.append("JPEG_QUALITY must be between 1 and 95")
        
        return errors
    
    def resizer_options(self) -> dict:
        """Constructor arguments for the configured resizer."""
        if self.resizer == 'convert':
            return {'timeout': self.resize_timeout}
        return {'quality': self.jpeg_quality}
