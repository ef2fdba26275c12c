"""
Site configuration for the spot OGP rewriter.

Every fixed value the rewriter needs (data-source URLs, fallback image,
locale strings) lives in SiteConfig so tests can substitute their own.
"""

import os
from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional, Tuple

# Gallery dataset first, walking-course dataset second
DEFAULT_CSV_URLS = (
    'https://docs.google.com/spreadsheets/d/e/2PACX-1vR0jkQnLXsIL33pmO60BCd0hIr_v5xh34cJ_IWAHkF0pTaj855pzicmNoVx6W8CPK3MEhlp-irodPSE/pub?gid=1232979489&single=true&output=csv',
    'https://docs.google.com/spreadsheets/d/e/2PACX-1vTia8V00j15toSprtd2bQV4JWrZprRz7m_cf73IZla6KOu62wtunUjCrb9wKkyNthWep8TfDeT8HW2B/pub?gid=1467172273&single=true&output=csv',
)

DEFAULT_FALLBACK_IMAGE_URL = 'https://i.postimg.cc/Dy2sThhC/IMG-9586.jpg'

DEFAULT_SITE_SUFFIXES = {
    'jp': '三原市まち歩き PHOTO MAP',
    'en': 'Mihara Walk PHOTO MAP',
}

DEFAULT_DESCRIPTION_FALLBACKS = {
    'jp': '{title}の風景です。',
    'en': '{title} scenery.',
}

DEFAULT_LOCALE = 'jp'
SUPPORTED_LOCALES = ('jp', 'en')

MAX_DESCRIPTION_LENGTH = 100
THUMBNAIL_WIDTH = 1200


@dataclass
class SiteConfig:
    csv_urls: Tuple[str, ...] = DEFAULT_CSV_URLS
    fallback_image_url: str = DEFAULT_FALLBACK_IMAGE_URL
    site_suffixes: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_SITE_SUFFIXES))
    description_fallbacks: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_DESCRIPTION_FALLBACKS))
    description_max_length: int = MAX_DESCRIPTION_LENGTH
    thumbnail_width: int = THUMBNAIL_WIDTH
    # None leaves the timeout to the hosting platform
    fetch_timeout: Optional[float] = None
    debug_meta: bool = False
    origin_url: Optional[str] = None

    def site_suffix(self, locale: str) -> str:
        return self.site_suffixes.get(locale) or self.site_suffixes[DEFAULT_LOCALE]

    def description_fallback(self, locale: str, title: str) -> str:
        template = self.description_fallbacks.get(locale) or self.description_fallbacks[DEFAULT_LOCALE]
        return template.format(title=title)


def _is_truthy(value: Optional[str]) -> bool:
    return (value or '').strip().lower() in ('1', 'true', 'yes', 'on')


def load_config(environ: Optional[Mapping[str, str]] = None) -> SiteConfig:
    """
    Build a SiteConfig from environment variables.

    Recognized variables:
        SPOT_CSV_URLS: comma-separated CSV URLs, tried in order
        FALLBACK_IMAGE_URL: image used when a spot has none
        CSV_FETCH_TIMEOUT: seconds; unset means no client-side timeout
        OGP_DEBUG_META: truthy to inject the ogp-debug meta tag
        ORIGIN_URL: base URL of the site whose pages are rewritten
    """
    env = os.environ if environ is None else environ
    config = SiteConfig()

    csv_urls = env.get('SPOT_CSV_URLS')
    if csv_urls:
        config.csv_urls = tuple(u.strip() for u in csv_urls.split(',') if u.strip())

    if env.get('FALLBACK_IMAGE_URL'):
        config.fallback_image_url = env['FALLBACK_IMAGE_URL']

    timeout = env.get('CSV_FETCH_TIMEOUT')
    if timeout:
        try:
            config.fetch_timeout = float(timeout)
        except ValueError:
            print(f"Ignoring invalid CSV_FETCH_TIMEOUT: {timeout!r}")

    config.debug_meta = _is_truthy(env.get('OGP_DEBUG_META'))

    origin = env.get('ORIGIN_URL')
    if origin:
        config.origin_url = origin.rstrip('/')

    return config
