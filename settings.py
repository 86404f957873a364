"""Server settings, read from the environment.

Gallery locations and resize options (PHOTO_ROOT, THUMB_DIR, RESIZER, ...)
are read by gallery.gallery_config.GalleryConfig.from_env().
"""
import os


def env_bool(name, default=False):
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {'yes', 'true', 't', 'y', '1'}


# Address and Bottle server adapter used by `python server.py`.
HOST = os.getenv('HOST', '0.0.0.0')
PORT = int(os.getenv('PORT', '3000'))
SERVER = os.getenv('SERVER', 'wsgiref')

DEBUG_APP = env_bool('DEBUG_APP')

LOG_LEVEL = os.getenv('LOG_LEVEL', 'DEBUG' if DEBUG_APP else 'INFO')
# Empty means log to stderr.
LOG_FILE = os.getenv('LOG_FILE', '')

# Send Access-Control-Allow-Origin: * on every response.
ALLOW_CORS = env_bool('ALLOW_CORS')

# Optional directory holding a front-end; its index.html is served at /.
UI_DIR = os.getenv('UI_DIR') or None
