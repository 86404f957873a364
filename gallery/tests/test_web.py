"""Tests for the HTTP routes, exercised through WebTest."""

import io
import os

import pytest
from PIL import Image
from webtest import TestApp

from gallery.identifiers import new_id
from gallery.photo_index import PhotoIndex
from gallery.resizers import PillowResizer, ResizeError, Resizer
from gallery.thumbnail_resolver import ThumbnailResolver
from gallery.web import create_app

ID_ROUTES = ['/photos/{}', '/d/{}', '/thumbs/{}']


@pytest.fixture
def index(photo_root, landscape_jpeg, small_gif, logger):
    return PhotoIndex.build(str(photo_root), logger=logger)


@pytest.fixture
def resolver(thumb_dir, logger):
    resolver = ThumbnailResolver(PillowResizer(), thumb_dir, logger=logger)
    yield resolver
    resolver.shutdown()


@pytest.fixture
def app(index, resolver):
    return TestApp(create_app(index, resolver))


def _id_of(index, name):
    return next(record.id for record in index if record.name == name)


class TestPhotos:
    """Tests for /photos."""
    
    def test_defaults(self, app, index):
        resp = app.get('/photos')
        
        assert resp.content_type == 'application/json'
        assert resp.json == {'photos': index.list_ids(0, 10), 'pages': 1, 'currentPage': 0}
    
    def test_empty_params_use_defaults(self, app, index):
        resp = app.get('/photos', params={'from': '', 'max': ''})
        
        assert resp.json['photos'] == index.list_ids(0, 10)
    
    def test_pagination(self, photo_root, image_factory, resolver, logger):
        """Test page metadata for 25 photos."""
        for i in range(25):
            image_factory(photo_root / f"{i:02d}.jpg", (20, 10), fmt='JPEG')
        index = PhotoIndex.build(str(photo_root), logger=logger)
        app = TestApp(create_app(index, resolver))
        
        resp = app.get('/photos', params={'from': '20', 'max': '10'})
        assert resp.json == {'photos': index.list_ids(20, 10), 'pages': 3, 'currentPage': 2}
        assert len(resp.json['photos']) == 5
        
        resp = app.get('/photos', params={'from': '7', 'max': '20'})
        assert len(resp.json['photos']) == 18
        assert resp.json['pages'] == 2
        assert resp.json['currentPage'] == 0
        
        resp = app.get('/photos', params={'from': '90', 'max': '30'})
        assert resp.json == {'photos': [], 'pages': 1, 'currentPage': 3}
    
    def test_invalid_from(self, app):
        resp = app.get('/photos', params={'from': '-1'}, status=400)
        
        assert resp.json == {'errors': [
            {'value': '-1', 'msg': 'Invalid value', 'param': 'from', 'location': 'query'}]}
    
    def test_invalid_max(self, app):
        resp = app.get('/photos', params={'max': '15'}, status=400)
        
        assert resp.json['errors'][0]['param'] == 'max'
    
    def test_reports_all_invalid_params(self, app):
        resp = app.get('/photos', params={'from': 'x', 'max': '100'}, status=400)
        
        assert [error['param'] for error in resp.json['errors']] == ['from', 'max']


class TestPhotoDetail:
    """Tests for /photos/<id>."""
    
    def test_detail(self, app, index, landscape_jpeg):
        photo_id = _id_of(index, 'landscape.jpg')
        
        resp = app.get(f"/photos/{photo_id}")
        
        assert resp.json == {
            'name': 'landscape.jpg',
            'size': {
                'width': 800,
                'height': 600,
                'onDisk': index[photo_id].size_display,
            },
            'thumb': f"/thumbs/{photo_id}",
            'url': f"/d/{photo_id}",
        }


class TestIdRoutes:
    """Tests shared by every id-keyed route."""
    
    @pytest.mark.parametrize('route', ID_ROUTES)
    def test_unknown_id(self, app, route):
        """Test well-formed but unknown ids get 404."""
        photo_id = new_id()
        
        resp = app.get(route.format(photo_id), status=404)
        
        assert resp.json == {'errors': [
            {'value': photo_id, 'msg': 'Not found', 'param': 'id', 'location': 'params'}]}
    
    @pytest.mark.parametrize('route', ID_ROUTES)
    @pytest.mark.parametrize('bad_id', ['abc', 'a' * 39, 'g' * 40, 'A' * 40, 'a' * 41])
    def test_malformed_id(self, app, route, bad_id):
        """Test malformed ids get 400 before any lookup."""
        resp = app.get(route.format(bad_id), status=400)
        
        assert resp.json == {'errors': [
            {'value': bad_id, 'msg': 'Invalid value', 'param': 'id', 'location': 'params'}]}
    
    @pytest.mark.parametrize('route', ID_ROUTES)
    def test_id_with_trailing_newline(self, app, index, route):
        """Test a known id followed by a newline is rejected, not looked up."""
        photo_id = _id_of(index, 'landscape.jpg')
        
        resp = app.get(route.format(photo_id + '%0A'), status=400)
        
        assert resp.json['errors'][0]['param'] == 'id'
        assert resp.json['errors'][0]['value'] == photo_id + '\n'


class TestDownload:
    """Tests for /d/<id>."""
    
    def test_original_bytes(self, app, index, landscape_jpeg):
        resp = app.get(f"/d/{_id_of(index, 'landscape.jpg')}")
        
        assert resp.content_type == 'image/jpeg'
        with open(landscape_jpeg, 'rb') as f:
            assert resp.body == f.read()
    
    def test_content_type_from_file(self, app, index):
        resp = app.get(f"/d/{_id_of(index, 'small.GIF')}")
        
        assert resp.content_type == 'image/gif'
    
    def test_png_content_type(self, photo_root, portrait_png, resolver, logger):
        """Test the header is a real media type guessed from the file name."""
        index = PhotoIndex.build(str(photo_root), logger=logger)
        app = TestApp(create_app(index, resolver))
        
        resp = app.get(f"/d/{_id_of(index, 'portrait.png')}")
        
        assert resp.headers['Content-Type'] == 'image/png'


class TestThumbnails:
    """Tests for /thumbs/<id>."""
    
    def test_scaled(self, app, index):
        """Test the larger side equals d and aspect ratio is kept."""
        resp = app.get(f"/thumbs/{_id_of(index, 'landscape.jpg')}", params={'d': '150'})
        
        assert resp.content_type == 'image/jpeg'
        with Image.open(io.BytesIO(resp.body)) as img:
            assert img.format == 'JPEG'
            assert img.width == 150
            assert img.height in (112, 113)
    
    def test_default_size(self, app, index):
        resp = app.get(f"/thumbs/{_id_of(index, 'landscape.jpg')}")
        
        with Image.open(io.BytesIO(resp.body)) as img:
            assert img.size[0] == 50
    
    def test_memoized_across_sizes(self, app, index):
        """Test later requests return the first thumbnail byte for byte."""
        photo_id = _id_of(index, 'landscape.jpg')
        
        first = app.get(f"/thumbs/{photo_id}", params={'d': '150'}).body
        
        assert app.get(f"/thumbs/{photo_id}", params={'d': '250'}).body == first
        assert app.get(f"/thumbs/{photo_id}", params={'d': '50'}).body == first
        assert app.get(f"/thumbs/{photo_id}").body == first
    
    def test_small_original_served_as_is(self, app, index, small_gif):
        """Test a photo that fits is returned unchanged."""
        resp = app.get(f"/thumbs/{_id_of(index, 'small.GIF')}", params={'d': '50'})
        
        assert resp.content_type == 'image/gif'
        with open(small_gif, 'rb') as f:
            assert resp.body == f.read()
    
    def test_invalid_size(self, app, index):
        resp = app.get(f"/thumbs/{_id_of(index, 'landscape.jpg')}", params={'d': '100'}, status=400)
        
        assert resp.json == {'errors': [
            {'value': '100', 'msg': 'Invalid value', 'param': 'd', 'location': 'query'}]}
        assert index[_id_of(index, 'landscape.jpg')].thumbnail_path is None
    
    def test_invalid_id_and_size(self, app):
        resp = app.get('/thumbs/nope', params={'d': '1'}, status=400)
        
        assert [error['param'] for error in resp.json['errors']] == ['id', 'd']
    
    def test_thumb_dir_removed_after_startup(self, app, index, thumb_dir):
        """Test a vanished thumbnail directory gives the JSON 500 body."""
        os.rmdir(thumb_dir)
        photo_id = _id_of(index, 'landscape.jpg')
        
        resp = app.get(f"/thumbs/{photo_id}", params={'d': '150'}, status=500)
        
        assert resp.content_type == 'application/json'
        assert resp.json == {'errors': [{
            'value': photo_id,
            'msg': 'Thumbnail generation failed',
            'param': 'id',
            'location': 'params',
        }]}
        assert index[photo_id].thumbnail_path is None

    def test_resize_failure(self, index, thumb_dir, mocker, logger):
        """Test a failed resize is a 500 and can be retried."""
        resizer = mocker.MagicMock(spec=Resizer)
        resizer.name = 'mock'
        resizer.scale.side_effect = ResizeError('decoder exploded')
        resolver = ThumbnailResolver(resizer, thumb_dir, logger=logger)
        app = TestApp(create_app(index, resolver))
        photo_id = _id_of(index, 'landscape.jpg')
        
        resp = app.get(f"/thumbs/{photo_id}", params={'d': '150'}, status=500)
        
        assert resp.json['errors'][0]['param'] == 'id'
        assert resp.json['errors'][0]['value'] == photo_id
        assert index[photo_id].thumbnail_path is None
        
        app.get(f"/thumbs/{photo_id}", params={'d': '150'}, status=500)
        assert resizer.scale.call_count == 2
        resolver.shutdown()


class TestScenario:
    """One 800x600 JPEG, from listing to memoized thumbnail."""
    
    def test_end_to_end(self, photo_root, landscape_jpeg, resolver, logger):
        app = TestApp(create_app(PhotoIndex.build(str(photo_root), logger=logger), resolver))
        
        photos = app.get('/photos').json['photos']
        assert len(photos) == 1
        photo_id = photos[0]
        
        size = app.get(f"/photos/{photo_id}").json['size']
        assert (size['width'], size['height']) == (800, 600)
        
        first = app.get(f"/thumbs/{photo_id}?d=150")
        with Image.open(io.BytesIO(first.body)) as img:
            assert max(img.size) == 150
            assert min(img.size) in (112, 113)
        
        second = app.get(f"/thumbs/{photo_id}?d=250")
        assert second.body == first.body


class TestAppOptions:
    """Tests for create_app options."""
    
    def test_main_page(self, app):
        resp = app.get('/')
        
        assert resp.text == 'Photo gallery server'
    
    def test_ui_dir(self, index, resolver, tmp_path):
        ui = tmp_path / 'ui'
        ui.mkdir()
        (ui / 'index.html').write_text('<h1>Album</h1>')
        app = TestApp(create_app(index, resolver, ui_dir=str(ui)))
        
        resp = app.get('/')
        
        assert resp.content_type == 'text/html'
        assert '<h1>Album</h1>' in resp.text
    
    def test_no_cors_by_default(self, app):
        assert 'Access-Control-Allow-Origin' not in app.get('/photos').headers
    
    def test_cors(self, index, resolver):
        app = TestApp(create_app(index, resolver, allow_cors=True))
        
        assert app.get('/photos').headers['Access-Control-Allow-Origin'] == '*'
        assert app.get(f"/photos/{new_id()}", status=404).headers['Access-Control-Allow-Origin'] == '*'
        photo_id = _id_of(index, 'landscape.jpg')
        assert app.get(f"/d/{photo_id}").headers['Access-Control-Allow-Origin'] == '*'
