"""
Shared pytest fixtures for the spot OGP rewriter tests.
"""

import pytest
import sys
import importlib.util
from pathlib import Path

# Project root for finding Cloud Function modules
PROJECT_ROOT = Path(__file__).parent.parent

if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from shared.config import SiteConfig


def _load_module_from_path(module_name: str, file_path: Path):
    """Load a module from a specific file path."""
    spec = importlib.util.spec_from_file_location(module_name, file_path)
    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    spec.loader.exec_module(module)
    return module


# Load Cloud Function modules with unique names at module load time
_ogp_rewriter_module = _load_module_from_path(
    'ogp_rewriter_main',
    PROJECT_ROOT / 'ogp-rewriter' / 'main.py'
)

_chat_proxy_module = _load_module_from_path(
    'chat_proxy_main',
    PROJECT_ROOT / 'chat-proxy' / 'main.py'
)


ORIGIN_URL = 'https://photomap.example.com'
GALLERY_CSV_URL = 'https://sheets.example.com/gallery.csv'
WALK_CSV_URL = 'https://sheets.example.com/walk.csv'
FALLBACK_IMAGE_URL = 'https://i.postimg.cc/Dy2sThhC/IMG-9586.jpg'
DRIVE_FILE_ID = 'ABCDEFGHIJKLMNOPQRSTUVWXY0123'


# ============================================================================
# Module Fixtures
# ============================================================================

@pytest.fixture
def ogp_rewriter_module():
    """The loaded ogp-rewriter main module (for monkeypatching CONFIG)."""
    return _ogp_rewriter_module


@pytest.fixture
def chat_proxy_module():
    """The loaded chat-proxy main module (for monkeypatching settings)."""
    return _chat_proxy_module


# ============================================================================
# OGP Rewriter Function Fixtures
# ============================================================================

@pytest.fixture
def fetch_csv():
    """Returns fetch_csv function from ogp-rewriter."""
    return _ogp_rewriter_module.fetch_csv


@pytest.fixture
def resolve_spot():
    """Returns resolve_spot function from ogp-rewriter."""
    return _ogp_rewriter_module.resolve_spot


@pytest.fixture
def apply_spot_metadata():
    """Returns apply_spot_metadata function from ogp-rewriter."""
    return _ogp_rewriter_module.apply_spot_metadata


@pytest.fixture
def rewrite_page():
    """Returns main entry point from ogp-rewriter."""
    return _ogp_rewriter_module.rewrite_page


# ============================================================================
# Chat Proxy Function Fixtures
# ============================================================================

@pytest.fixture
def chat():
    """Returns main entry point from chat-proxy."""
    return _chat_proxy_module.chat


# ============================================================================
# Data Fixtures
# ============================================================================

@pytest.fixture
def site_config():
    """SiteConfig pointing at two mocked CSV sources and a mocked origin."""
    return SiteConfig(
        csv_urls=(GALLERY_CSV_URL, WALK_CSV_URL),
        origin_url=ORIGIN_URL,
    )


@pytest.fixture
def gallery_csv():
    """Gallery dataset with quoted, multi-line and bilingual cells."""
    return (
        'タイトル (title),title_en,紹介 (desc),desc_en,画像 (image)\r\n'
        '三原城跡,Mihara Castle Ruins,"浮城と呼ばれた城の跡。\n駅のすぐ北にあります。",'
        '"The ""floating castle"", right by the station.",'
        f'https://drive.google.com/file/d/{DRIVE_FILE_ID}/view?usp=sharing\r\n'
        '筆影山,,"瀬戸内海の多島美を望む山",,https://i.postimg.cc/abc123/fudekage.jpg\r\n'
        '宗光寺,Sokoji Temple,,,\r\n'
    )


@pytest.fixture
def walk_csv():
    """Walking-course dataset with plain English headers."""
    return (
        'title,description,image\n'
        'Clock Tower,A nice view.,'
        f'https://drive.google.com/file/d/{DRIVE_FILE_ID}/view\n'
        'Old　Bridge,Crossing the river,\n'
    )


@pytest.fixture
def sample_page_html():
    """Returns the site's index page with full SEO/OGP head tags."""
    return """<!DOCTYPE html>
<html lang="ja">
<head>
    <meta charset="utf-8">
    <title>三原市まち歩き PHOTO MAP</title>
    <meta name="description" content="まだ知らない三原の景色を、みんなで描くフォトマップ。">
    <link rel="canonical" href="https://photomap.example.com/">
    <meta property="og:title" content="三原市まち歩き PHOTO MAP">
    <meta property="og:description" content="まだ知らない三原の景色を、みんなで描くフォトマップ。">
    <meta property="og:image" content="https://i.postimg.cc/Dy2sThhC/IMG-9586.jpg">
    <meta name="twitter:card" content="summary_large_image">
    <meta name="twitter:title" content="三原市まち歩き PHOTO MAP">
    <meta name="twitter:description" content="まだ知らない三原の景色を、みんなで描くフォトマップ。">
    <meta name="twitter:image" content="https://i.postimg.cc/Dy2sThhC/IMG-9586.jpg">
</head>
<body>
    <div id="map"></div>
</body>
</html>
"""


@pytest.fixture
def minimal_page_html():
    """Returns a page with only a title and description tag."""
    return """<!DOCTYPE html>
<html>
<head>
    <title>PHOTO MAP</title>
    <meta name="description" content="Default description">
</head>
<body></body>
</html>
"""


@pytest.fixture
def mock_flask_request():
    """Factory for creating mock Flask request objects."""
    class MockRequest:
        def __init__(self, json_data=None, method='POST', args=None, path='/'):
            self._json = json_data
            self.method = method
            self.args = args or {}
            self.path = path
            self.url = ORIGIN_URL + path
            self.data = b''

        def get_json(self, force=False, silent=False):
            # None stands in for a body that is not valid JSON
            return self._json

    return MockRequest
