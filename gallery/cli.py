"""
Command Line Interface for the photo gallery server.
"""

import argparse
import logging
import sys
from typing import List, Optional

import settings

from .gallery_config import GalleryConfig
from .photo_index import PhotoIndex, StorageUnavailableError
from .photo_record import PhotoRecord
from .resizers import RESIZERS, get_resizer
from .scan_progress import ScanProgress
from .thumbnail_resolver import ThumbnailResolver
from .web import create_app


def setup_logging(verbose: bool) -> logging.Logger:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    
    logging.basicConfig(
        level=level,
        format='%(asctime)s [%(levelname)s] %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    
    logging.getLogger('PIL').setLevel(logging.WARNING)
    logging.getLogger('sh').setLevel(logging.WARNING)
    
    return logging.getLogger('gallery')


def get_gallery_config(args: argparse.Namespace) -> GalleryConfig:
    """Get gallery configuration from environment and CLI overrides."""
    config = GalleryConfig.from_env()
    
    if getattr(args, 'root', None):
        config.photo_root = args.root
    if getattr(args, 'thumb_dir', None):
        config.thumb_dir = args.thumb_dir
    if getattr(args, 'resizer', None):
        config.resizer = args.resizer
    if getattr(args, 'resize_timeout', None):
        config.resize_timeout = args.resize_timeout
    if getattr(args, 'workers', None):
        config.scan_workers = args.workers
    
    return config


def build_index(
    config: GalleryConfig,
    logger: logging.Logger,
    progress: Optional[ScanProgress] = None
) -> PhotoIndex:
    """Validate config and scan the photo root; raises ValueError on bad config."""
    errors = config.validate()
    if errors:
        for error in errors:
            logger.error(error)
        raise ValueError("Gallery configuration invalid")
    return PhotoIndex.build(
        config.photo_root,
        workers=config.scan_workers,
        progress=progress,
        logger=logger,
    )


def add_config_arguments(parser: argparse.ArgumentParser) -> None:
    """Add photo root and scan arguments to a parser."""
    parser.add_argument('--root', metavar='PATH',
                        help='Directory scanned for photos (default: PHOTO_ROOT or ./static)')
    parser.add_argument('--workers', type=int,
                        help='Threads used to probe files (default: SCAN_WORKERS or 8)')


def cmd_serve(args: argparse.Namespace) -> int:
    """Build the index, then serve it over HTTP."""
    from bottle import run
    
    logger = setup_logging(args.verbose)
    config = get_gallery_config(args)
    
    try:
        index = build_index(config, logger)
        resizer = get_resizer(config.resizer, **config.resizer_options())
        resolver = ThumbnailResolver(
            resizer,
            config.thumb_dir,
            timeout=config.resize_timeout,
            workers=config.resize_workers,
        )
    except (ValueError, StorageUnavailableError) as e:
        logger.error(f"Cannot start server: {e}")
        return 1
    
    logger.info(f"Photo root: {config.photo_root} ({len(index)} photos)")
    logger.info(f"Thumbnails: {config.thumb_dir} (resizer: {resizer.name})")
    
    app = create_app(index, resolver, allow_cors=args.cors, ui_dir=args.ui_dir)
    try:
        run(app=app, host=args.host, port=args.port, server=args.server, quiet=not args.verbose)
    finally:
        resolver.shutdown()
    return 0


def cmd_scan(args: argparse.Namespace) -> int:
    """Build the index once and print what it found."""
    logger = setup_logging(args.verbose)
    config = get_gallery_config(args)
    
    progress = None
    if not args.quiet:
        progress = ScanProgress(show_files=args.show_files, logger=logger)
    
    try:
        index = build_index(config, logger, progress)
    except (ValueError, StorageUnavailableError) as e:
        logger.error(f"Scan failed: {e}")
        return 1
    
    print()
    print(f"  Photos:      {len(index):,}")
    print(f"  Total size:  {PhotoRecord._format_bytes(index.total_bytes)}")
    print(f"  Skipped:     {len(index.skipped):,}")
    for path in index.skipped:
        print(f"    {path}")
    return 0


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser."""
    parser = argparse.ArgumentParser(
        prog='gallery',
        description='Serve a directory of photos with on-demand thumbnails.',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Serve ./static on port 3000
  python -m gallery serve

  # Serve another folder, resizing with ImageMagick
  python -m gallery serve --root /srv/photos --resizer convert

  # Check which files would be indexed
  python -m gallery scan --root /srv/photos --show-files
"""
    )
    
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Enable debug logging')
    
    subparsers = parser.add_subparsers(dest='command', help='Command to run')
    
    serve_parser = subparsers.add_parser('serve', help='Run the HTTP server')
    add_config_arguments(serve_parser)
    serve_parser.add_argument('--thumb-dir', metavar='PATH',
                              help='Directory for generated thumbnails (default: THUMB_DIR)')
    serve_parser.add_argument('--resizer', choices=sorted(RESIZERS),
                              help='Resize engine (default: RESIZER or pillow)')
    serve_parser.add_argument('--resize-timeout', type=float,
                              help='Seconds allowed per resize (default: RESIZE_TIMEOUT or 30)')
    serve_parser.add_argument('--host', default='127.0.0.1',
                              help='Interface to bind (default: 127.0.0.1)')
    serve_parser.add_argument('--port', type=int, default=3000,
                              help='Port to listen on (default: 3000)')
    serve_parser.add_argument('--server', default='wsgiref',
                              help='Bottle server adapter (default: wsgiref)')
    serve_parser.add_argument('--cors', action=argparse.BooleanOptionalAction,
                              default=settings.ALLOW_CORS,
                              help='Allow cross-origin requests (default: ALLOW_CORS)')
    serve_parser.add_argument('--ui-dir', metavar='PATH', default=settings.UI_DIR,
                              help='Directory whose index.html is served at / (default: UI_DIR)')
    serve_parser.add_argument('-v', '--verbose', action='store_true', default=argparse.SUPPRESS,
                              help='Enable debug logging')
    
    scan_parser = subparsers.add_parser('scan', help='Scan the photo root and report')
    add_config_arguments(scan_parser)
    scan_parser.add_argument('--show-files', action='store_true',
                             help='Print each photo as it is indexed')
    scan_parser.add_argument('-q', '--quiet', action='store_true',
                             help='Suppress progress output')
    scan_parser.add_argument('-v', '--verbose', action='store_true', default=argparse.SUPPRESS,
                             help='Enable debug logging')
    
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)
    
    if not args.command:
        parser.print_help()
        return 1
    
    commands = {
        'serve': cmd_serve,
        'scan': cmd_scan,
    }
    
    return commands[args.command](args)


if __name__ == '__main__':
    sys.exit(main())
