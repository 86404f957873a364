"""
Pytest fixtures for gallery tests.
"""

import pytest


def make_image(path, size, mode='RGB', color='red', fmt=None):
    """Write a solid-color image to path and return the path as str."""
    from PIL import Image
    
    path.parent.mkdir(parents=True, exist_ok=True)
    img = Image.new(mode, size, color=color)
    img.save(str(path), format=fmt)
    return str(path)


@pytest.fixture
def image_factory():
    """Fixture providing make_image for tests that need extra files."""
    return make_image


@pytest.fixture
def photo_root(tmp_path):
    """Fixture providing an empty photo root directory."""
    root = tmp_path / 'photos'
    root.mkdir()
    return root


@pytest.fixture
def thumb_dir(tmp_path):
    """Fixture providing a thumbnail directory path (not yet created)."""
    return str(tmp_path / 'thumbs')


@pytest.fixture
def landscape_jpeg(photo_root):
    """Fixture providing an 800x600 JPEG."""
    return make_image(photo_root / 'landscape.jpg', (800, 600), color='blue')


@pytest.fixture
def portrait_png(photo_root):
    """Fixture providing a 300x400 PNG with transparency."""
    return make_image(photo_root / 'nested' / 'portrait.png', (300, 400),
                      mode='RGBA', color=(255, 0, 0, 128))


@pytest.fixture
def small_gif(photo_root):
    """Fixture providing a 40x30 GIF that fits every thumbnail size."""
    return make_image(photo_root / 'small.GIF', (40, 30), color='green', fmt='GIF')


@pytest.fixture
def sample_record(landscape_jpeg):
    """Fixture providing a PhotoRecord for the 800x600 JPEG."""
    import os
    from gallery.photo_record import PhotoRecord
    
    return PhotoRecord(
        id='a' * 40,
        source_path=landscape_jpeg,
        width=800,
        height=600,
        size_on_disk=os.path.getsize(landscape_jpeg),
    )


@pytest.fixture
def logger():
    """Fixture providing a logger."""
    import logging
    return logging.getLogger('test')
