#!/usr/bin/env python3

import logging

import settings
from gallery import GalleryConfig, PhotoIndex, ThumbnailResolver, create_app, get_resizer

# Configure logging
level = logging.getLevelName(settings.LOG_LEVEL)
logging.basicConfig(
    filename=settings.LOG_FILE or None,
    level=level,
    format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
)
logging.getLogger('PIL').setLevel(logging.WARNING)


def log(msg):
    logging.debug(msg)


def build_application():
    """Scan the photo root and return the WSGI app serving it.

    Raises StorageUnavailableError (or ValueError for bad settings) so the
    process never starts serving without a usable index and thumbnail area.
    """
    config = GalleryConfig.from_env()
    errors = config.validate()
    if errors:
        for error in errors:
            logging.error(error)
        raise ValueError("Gallery configuration invalid: " + "; ".join(errors))

    index = PhotoIndex.build(config.photo_root, workers=config.scan_workers)
    resolver = ThumbnailResolver(
        get_resizer(config.resizer, **config.resizer_options()),
        config.thumb_dir,
        timeout=config.resize_timeout,
        workers=config.resize_workers,
    )
    log(f"Serving {len(index)} photos from {config.photo_root}")
    return create_app(index, resolver, allow_cors=settings.ALLOW_CORS, ui_dir=settings.UI_DIR)


app = application = build_application()


if __name__ == '__main__':
    from bottle import run
    log("running server...")

    run(app=application,
        host=settings.HOST,
        port=settings.PORT,
        server=settings.SERVER,
        debug=settings.DEBUG_APP,
        )

    log("Exiting.")
