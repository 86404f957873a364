"""
Photo gallery server.

Scans a directory tree for images once at startup and serves paginated
listings, metadata, originals and on-demand thumbnails over HTTP.
"""

__version__ = "1.0.0"

from .identifiers import new_id, is_valid_id
from .photo_record import PhotoRecord
from .photo_index import PhotoIndex, StorageUnavailableError
from .scan_progress import ScanProgress
from .resizers import AUTO, Resizer, PillowResizer, ConvertResizer, ResizeError, get_resizer
from .thumbnail_resolver import ThumbnailResolver
from .gallery_config import GalleryConfig
from .web import create_app

__all__ = [
    "new_id",
    "is_valid_id",
    "PhotoRecord",
    "PhotoIndex",
    "StorageUnavailableError",
    "ScanProgress",
    "AUTO",
    "Resizer",
    "PillowResizer",
    "ConvertResizer",
    "ResizeError",
    "get_resizer",
    "ThumbnailResolver",
    "GalleryConfig",
    "create_app",
]
