"""
OGP Rewriter Cloud Function

Serves pages of the photo map site with per-spot SEO and link-preview
metadata.

Responsibilities:
- Fetch the original page from the origin site
- For HTML pages requested with ?spot=<title>, look the spot up in the
  published CSV datasets (gallery first, walking course second)
- Rewrite <title>, description, Open Graph and Twitter Card tags for the
  spot, in Japanese or English depending on ?lang=

Does NOT:
- Cache datasets between requests
- Retry failed CSV fetches
- Ever break a page: any failure returns the original HTML unmodified
"""

import functions_framework
import requests
from bs4.dammit import EncodingDetector
import codecs
import json
import os
import sys

# Add shared module to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))
from shared.config import load_config
from shared.csv_utils import parse_csv
from shared.spot_utils import find_spot
from shared.meta_utils import (
    normalize_locale,
    build_display_fields,
    rewrite_meta_tags,
    add_debug_tag,
)

# Configuration
CONFIG = load_config()
USER_AGENT = 'Mozilla/5.0 (compatible; PhotoMapOGPRewriter/1.0)'

# Headers that no longer describe the body once it has been decoded and re-emitted
DROPPED_HEADERS = {'content-encoding', 'content-length', 'transfer-encoding', 'connection', 'keep-alive'}


def fetch_csv(url: str, timeout: float = None) -> tuple:
    """Fetch a published CSV document. Returns (text, error)."""
    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()

        # Sheets exports are UTF-8 but are not always labelled as such
        return response.content.decode('utf-8-sig', errors='replace'), None

    except requests.exceptions.Timeout:
        return None, 'Request timed out'
    except requests.exceptions.HTTPError as e:
        return None, f'HTTP error: {e.response.status_code}'
    except requests.exceptions.RequestException as e:
        return None, f'Request failed: {str(e)}'


def resolve_spot(spot: str, config=CONFIG) -> tuple:
    """
    Look up a spot across every configured CSV source.

    Sources are tried in order and the first match wins. A source that
    cannot be fetched counts as having no data.

    Returns:
        Tuple of (record or None, status) where status is one of
        'ok', 'spot_not_found_in_csv' or 'error_<message>'
    """
    errors = []

    for url in config.csv_urls:
        csv_text, error = fetch_csv(url, config.fetch_timeout)
        if error:
            print(f"CSV fetch failed for {url}: {error}")
            errors.append(error)
            continue

        record = find_spot(parse_csv(csv_text), spot)
        if record:
            return record, 'ok'

    if errors and len(errors) == len(config.csv_urls):
        return None, f'error_{errors[0]}'

    return None, 'spot_not_found_in_csv'


def apply_spot_metadata(html: str, spot: str, lang: str = None, config=CONFIG, canonical_url: str = None) -> str:
    """
    Rewrite the head metadata of html for the given spot.

    Never raises. Without a spot, without a match, or on any error the
    original html is returned (carrying only the ogp-debug tag when
    config.debug_meta is set).
    """
    if not spot:
        return html

    try:
        record, status = resolve_spot(spot, config)

        if not record:
            return add_debug_tag(html, status) if config.debug_meta else html

        fields = build_display_fields(record, normalize_locale(lang), config)
        return rewrite_meta_tags(
            html,
            fields,
            canonical_url=canonical_url,
            debug_status='success_rewritten' if config.debug_meta else None,
        )

    except Exception as e:
        print(f"OGP rewrite error for spot {spot!r}: {e}")
        return html


def fetch_page(url: str, timeout: float = None) -> tuple:
    """Fetch the original page from the origin. Returns (response, error)."""
    try:
        headers = {
            'User-Agent': USER_AGENT,
            'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8',
        }

        response = requests.get(url, headers=headers, timeout=timeout, allow_redirects=True)
        return response, None

    except requests.exceptions.Timeout:
        return None, 'Request timed out'
    except requests.exceptions.RequestException as e:
        return None, f'Request failed: {str(e)}'


def passthrough_headers(response) -> dict:
    """Copy origin response headers that still apply to the re-emitted body."""
    return {
        name: value
        for name, value in response.headers.items()
        if name.lower() not in DROPPED_HEADERS
    }


def page_encoding(response) -> str:
    """
    Charset of a page: the Content-Type header first, then a <meta charset>
    or http-equiv declaration in the document, then UTF-8.
    """
    declared = []
    content_type = response.headers.get('Content-Type', '')
    if 'charset' in content_type.lower() and response.encoding:
        declared.append(response.encoding)
    declared.append(EncodingDetector.find_declared_encoding(response.content, is_html=True))

    for encoding in declared:
        if not encoding:
            continue
        try:
            return codecs.lookup(encoding).name
        except LookupError:
            print(f"Unknown page charset: {encoding}")
    return 'utf-8'


@functions_framework.http
def rewrite_page(request):
    """
    Main Cloud Function entry point.

    Expected request:
        GET /<page path>?spot=<spot title>&lang=<jp|en>

    The page is fetched from ORIGIN_URL + path. Non-HTML and non-200
    responses are passed through untouched.
    """
    # Handle CORS
    if request.method == 'OPTIONS':
        headers = {
            'Access-Control-Allow-Origin': '*',
            'Access-Control-Allow-Methods': 'GET',
            'Access-Control-Allow-Headers': 'Content-Type',
            'Access-Control-Max-Age': '3600'
        }
        return ('', 204, headers)

    json_headers = {'Access-Control-Allow-Origin': '*', 'Content-Type': 'application/json'}

    if not CONFIG.origin_url:
        return (json.dumps({
            'error': {
                'stage': 'config',
                'message': 'ORIGIN_URL not configured',
                'recoverable': False
            }
        }), 500, json_headers)

    page_url = CONFIG.origin_url + (request.path or '/')
    page, fetch_error = fetch_page(page_url, CONFIG.fetch_timeout)

    if fetch_error:
        return (json.dumps({
            'url': page_url,
            'error': {
                'stage': 'fetch',
                'message': fetch_error,
                'recoverable': True
            }
        }), 502, json_headers)

    headers = passthrough_headers(page)
    content_type = page.headers.get('Content-Type', '')
    spot = request.args.get('spot')

    # Only successful HTML pages requested with ?spot= are rewritten
    if page.status_code != 200 or 'text/html' not in content_type or not spot:
        return (page.content, page.status_code, headers)

    encoding = page_encoding(page)
    html = page.content.decode(encoding, errors='replace')
    body = apply_spot_metadata(
        html,
        spot,
        request.args.get('lang'),
        config=CONFIG,
        canonical_url=request.url,
    )

    if body == html:
        return (page.content, page.status_code, headers)

    return (body.encode(encoding, errors='xmlcharrefreplace'), page.status_code, headers)
