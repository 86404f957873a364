"""
Bottle application exposing the photo index and thumbnails over HTTP.
"""

import logging
import os
from functools import wraps
from mimetypes import guess_type
from typing import Optional

from bottle import Bottle, HTTPResponse, Response, request, response, static_file

from .photo_index import PhotoIndex
from .resizers import ResizeError
from .thumbnail_resolver import ThumbnailResolver
from .validation import (
    DEFAULT_PAGE_SIZE, DEFAULT_THUMB_SIZE, PAGE_SIZES, THUMB_SIZES,
    check_id, error_entry, not_found, parse_choice, parse_offset)

log = logging.getLogger(__name__)


def allow_cross_origin(func):
    """Decorate a view function to allow cross domain access."""
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            result = func(*args, **kwargs)
        except HTTPResponse as r:
            r.set_header('Access-Control-Allow-Origin', '*')
            raise
        (result if isinstance(result, Response) else response) \
            .set_header('Access-Control-Allow-Origin', '*')
        return result
    return wrapper


def send_file(path: str, mimetype: Optional[str] = None):
    """Serve path, with a content type guessed from its name unless given."""
    dirpath, filename = os.path.split(path)
    if mimetype is None:
        mimetype, _ = guess_type(filename)
    return static_file(filename, root=dirpath, mimetype=mimetype or 'application/octet-stream')


def errors_response(status: int, errors: list) -> dict:
    response.status = status
    return {'errors': errors}


def create_app(
    index: PhotoIndex,
    resolver: ThumbnailResolver,
    allow_cors: bool = False,
    ui_dir: Optional[str] = None
) -> Bottle:
    """
    Build the gallery WSGI application.
    
    Args:
        index: Photo index, fully built
        resolver: Thumbnail resolver used by /thumbs
        allow_cors: Add Access-Control-Allow-Origin: * to every response
        ui_dir: Optional directory whose index.html is served at /
    """
    app = Bottle()
    cors = allow_cross_origin if allow_cors else (lambda func: func)
    
    def lookup(photo_id, errors):
        """Return (record, None) or (None, error body) for an id route."""
        if errors:
            return None, errors_response(400, errors)
        record = index.get(photo_id)
        if record is None:
            log.debug(f"Photo not found: {photo_id}")
            response.status = 404
            return None, not_found(photo_id)
        return record, None
    
    @app.route('/')
    @cors
    def main_page():
        if ui_dir and os.path.isfile(os.path.join(ui_dir, 'index.html')):
            return static_file('index.html', root=ui_dir)
        response.content_type = 'text/plain; charset=utf-8'
        return 'Photo gallery server'
    
    @app.route('/photos')
    @cors
    def list_photos():
        """Paginated list of photo ids."""
        errors = []
        offset = parse_offset(request.query.get('from'), errors)
        limit = parse_choice(request.query.get('max'), 'max', PAGE_SIZES, DEFAULT_PAGE_SIZE, errors)
        if errors:
            return errors_response(400, errors)
        return index.page(offset, limit)
    
    @app.route('/photos/<photo_id>')
    @cors
    def photo_detail(photo_id):
        """Name, dimensions, size on disk and URLs of one photo."""
        record, error = lookup(photo_id, check_id(photo_id, []))
        if error is not None:
            return error
        return record.to_dict()
    
    @app.route('/d/<photo_id>')
    @cors
    def download(photo_id):
        """The original image file."""
        record, error = lookup(photo_id, check_id(photo_id, []))
        if error is not None:
            return error
        return send_file(record.source_path)
    
    @app.route('/thumbs/<photo_id>')
    @cors
    def thumbnail(photo_id):
        """A thumbnail no larger than d pixels on its longer side."""
        errors = check_id(photo_id, [])
        size = parse_choice(request.query.get('d'), 'd', THUMB_SIZES, DEFAULT_THUMB_SIZE, errors)
        record, error = lookup(photo_id, errors)
        if error is not None:
            return error
        try:
            path = resolver.resolve(record, size)
        except ResizeError as e:
            log.error(f"Thumbnail generation failed for {photo_id}: {e}")
            return errors_response(500, [
                error_entry(photo_id, 'id', 'params', 'Thumbnail generation failed')])
        if record.is_generated_thumbnail:
            return send_file(path, mimetype='image/jpeg')
        return send_file(path)
    
    return app

