"""
PhotoRecord - Entry for a single discovered image file.
"""

import os
import threading
from dataclasses import dataclass, field
from typing import Optional


@dataclass
class PhotoRecord:
    """
    One image file found by the startup scan.
    
    Attributes:
        id: Opaque 40-char hex token, the external reference key
        source_path: Absolute path to the original file
        width: Width in pixels, read once at creation
        height: Height in pixels, read once at creation
        size_on_disk: Size of the original in bytes
        thumbnail_path: Path served for /thumbs, set by the first successful resolve
        is_generated_thumbnail: True if thumbnail_path is a generated JPEG
    """
    id: str
    source_path: str
    width: int
    height: int
    size_on_disk: int
    thumbnail_path: Optional[str] = None
    is_generated_thumbnail: bool = False
    lock: threading.Lock = field(
        default_factory=threading.Lock, repr=False, compare=False
    )
    
    @property
    def name(self) -> str:
        return os.path.basename(self.source_path)
    
    @property
    def url(self) -> str:
        return f"/d/{self.id}"
    
    @property
    def thumb_url(self) -> str:
        return f"/thumbs/{self.id}"
    
    @property
    def size_display(self) -> str:
        return self._format_bytes(self.size_on_disk)
    
    def fits_within(self, dimension: int) -> bool:
        """True if neither side exceeds dimension."""
        return self.width <= dimension and self.height <= dimension
    
    def to_dict(self) -> dict:
        """Detail representation served by /photos/<id>."""
        return {
            'name': self.name,
            'size': {
                'width': self.width,
                'height': self.height,
                'onDisk': self.size_display,
            },
            'thumb': self.thumb_url,
            'url': self.url,
        }
    
    def format_status(self) -> str:
        """
        Format a one-line status string for scan output.
        
        Returns:
            Status string like "beach.jpg 800x600 (45.2 KB)"
        """
        return f"{self.name} {self.width}x{self.height} ({self.size_display})"
    
    @staticmethod
    def _format_bytes(bytes_val: Optional[int]) -> str:
        """Format bytes as human-readable string."""
        if bytes_val is None:
            return "unknown"
        for unit in ['B', 'KB', 'MB', 'GB']:
            if bytes_val < 1024:
                return f"{bytes_val:.1f} {unit}"
            bytes_val /= 1024
        return f"{bytes_val:.1f} TB"
