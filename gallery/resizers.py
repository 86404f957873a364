"""
Resizers - Scale-to-fit engines that write a JPEG thumbnail to disk.

Two interchangeable implementations are provided: PillowResizer decodes and
resizes in-process, ConvertResizer shells out to ImageMagick's convert.
"""

import logging
import os
import tempfile
from typing import Optional, Tuple, Union

import sh
from PIL import Image

# Passed for the dimension that should follow the aspect ratio of the other.
AUTO = 'AUTO'

Dimension = Union[int, str]


class ResizeError(Exception):
    """Raised when a thumbnail could not be produced."""
    pass


def fit_size(
    src_width: int,
    src_height: int,
    width: Dimension,
    height: Dimension
) -> Tuple[int, int]:
    """Resolve the AUTO side of width/height from the source aspect ratio."""
    if width == AUTO:
        return max(1, round(src_width * height / src_height)), height
    return width, max(1, round(src_height * width / src_width))


def _check_dimensions(width: Dimension, height: Dimension) -> None:
    if (width == AUTO) == (height == AUTO):
        raise ValueError("Exactly one of width and height must be AUTO")
    fixed = height if width == AUTO else width
    if not isinstance(fixed, int) or fixed <= 0:
        raise ValueError(f"Invalid target dimension: {fixed!r}")


def _temp_sibling(output_path: str) -> str:
    """Create an empty .jpg next to output_path for an atomic replace."""
    dirname = os.path.dirname(os.path.abspath(output_path))
    fd, tmp_path = tempfile.mkstemp(dir=dirname, suffix='.jpg', prefix='.part-')
    os.close(fd)
    return tmp_path


def _discard(path: str) -> None:
    try:
        os.remove(path)
    except FileNotFoundError:
        pass


class Resizer:
    """
    Interface for resize engines.
    
    scale() writes a JPEG to output_path or raises ResizeError.
    """
    
    name = 'base'
    
    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)
    
    def scale(
        self,
        source_path: str,
        output_path: str,
        width: Dimension,
        height: Dimension
    ) -> None:
        """
        Downscale source_path into a JPEG at output_path.
        
        Args:
            source_path: Original image
            output_path: Destination, replaced atomically
            width: Target width in pixels, or AUTO
            height: Target height in pixels, or AUTO
        """
        _check_dimensions(width, height)
        try:
            tmp_path = _temp_sibling(output_path)
        except OSError as e:
            self.logger.error(f"Cannot write thumbnail {output_path}: {e}")
            raise ResizeError(f"Cannot write thumbnail {output_path}: {e}") from e
        try:
            self._render(source_path, tmp_path, width, height)
            os.replace(tmp_path, output_path)
        except OSError as e:
            _discard(tmp_path)
            self.logger.error(f"Cannot write thumbnail {output_path}: {e}")
            raise ResizeError(f"Cannot write thumbnail {output_path}: {e}") from e
        except BaseException:
            _discard(tmp_path)
            raise
        self.logger.debug(f"Scaled {source_path} -> {output_path} ({width}x{height})")
    
    def _render(
        self,
        source_path: str,
        tmp_path: str,
        width: Dimension,
        height: Dimension
    ) -> None:
        raise NotImplementedError


class PillowResizer(Resizer):
    """
    Generates thumbnails in-process using Pillow.
    """
    
    name = 'pillow'
    
    def __init__(self, quality: int = 85, logger: Optional[logging.Logger] = None):
        """
        Initialize Pillow resizer.
        
        Args:
            quality: JPEG quality for output (default: 85)
            logger: Optional logger instance
        """
        super().__init__(logger)
        self.quality = quality
    
    def _render(self, source_path, tmp_path, width, height):
        try:
            with Image.open(source_path) as img:
                size = fit_size(img.width, img.height, width, height)
                thumb = self._convert_color_mode(img)
                thumb = thumb.resize(size, Image.Resampling.LANCZOS)
                thumb.save(tmp_path, format='JPEG', quality=self.quality, optimize=True)
        except (OSError, ValueError, Image.DecompressionBombError) as e:
            self.logger.error(f"Error generating thumbnail for {source_path}: {e}")
            raise ResizeError(f"Cannot resize {source_path}: {e}") from e
    
    def _convert_color_mode(self, img: Image.Image) -> Image.Image:
        """Flatten alpha and palette images onto white for JPEG output."""
        if img.mode in ('RGBA', 'LA'):
            background = Image.new('RGB', img.size, (255, 255, 255))
            if img.mode == 'LA':
                img = img.convert('RGBA')
            background.paste(img, mask=img.split()[-1])
            return background
        elif img.mode == 'P':
            img = img.convert('RGBA')
            background = Image.new('RGB', img.size, (255, 255, 255))
            background.paste(img, mask=img.split()[-1])
            return background
        elif img.mode != 'RGB':
            return img.convert('RGB')
        return img


class ConvertResizer(Resizer):
    """
    Generates thumbnails with ImageMagick's convert executable.
    """
    
    name = 'convert'
    
    def __init__(
        self,
        timeout: float = 30,
        executable: str = 'convert',
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize convert resizer.
        
        Args:
            timeout: Seconds before the convert process is killed
            executable: Name or path of the ImageMagick convert binary
            logger: Optional logger instance
        """
        super().__init__(logger)
        self.timeout = timeout
        self.executable = executable
    
    @staticmethod
    def geometry(width: Dimension, height: Dimension) -> str:
        """ImageMagick geometry for a single fixed side, e.g. '150x' or 'x150'."""
        if width == AUTO:
            return f"x{height}"
        if height == AUTO:
            return f"{width}x"
        return f"{width}x{height}"
    
    def _render(self, source_path, tmp_path, width, height):
        try:
            convert = sh.Command(self.executable)
        except sh.CommandNotFound as e:
            raise ResizeError(f"{self.executable} not found") from e
        
        # [0] selects the first frame of animated GIFs
        args = [f"{source_path}[0]", '-thumbnail', self.geometry(width, height), tmp_path]
        self.logger.debug(f"{self.executable} {' '.join(args)}")
        try:
            convert(*args, _timeout=self.timeout)
        except sh.TimeoutException as e:
            self.logger.error(f"convert timed out after {self.timeout}s on {source_path}")
            raise ResizeError(f"convert timed out on {source_path}") from e
        except sh.ErrorReturnCode as e:
            stderr = e.stderr.decode(errors='replace').strip()
            self.logger.error(f"convert exited {e.exit_code} on {source_path}: {stderr}")
            raise ResizeError(f"convert failed on {source_path}: {stderr}") from e


RESIZERS = {
    PillowResizer.name: PillowResizer,
    ConvertResizer.name: ConvertResizer,
}


def get_resizer(name: str, **kwargs) -> Resizer:
    """
    Build a resizer by name.
    
    Args:
        name: 'pillow' or 'convert'
        **kwargs: Passed to the resizer constructor
    """
    try:
        cls = RESIZERS[name]
    except KeyError:
        raise ValueError(f"Unknown resizer: {name!r} (expected one of {sorted(RESIZERS)})")
    return cls(**kwargs)
