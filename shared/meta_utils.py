"""
Head metadata rewriting for spot pages.

Given a spot record and a locale, derives the display title, description and
image, then rewrites the matching tags of an existing HTML document:

- <title>
- <meta name="description">
- <meta property="og:title|og:description|og:image">
- <meta name="twitter:title|twitter:description|twitter:image">
- <link rel="canonical"> (only when a canonical URL is supplied)

Tags missing from the source document are never created. BeautifulSoup finds
the tags; edits are spliced into the original text at their source positions
so the rest of the document passes through byte for byte.
"""

import re
from html import escape
from typing import Dict, List, Optional, Tuple

from bs4 import BeautifulSoup, Tag

from .config import DEFAULT_LOCALE, MAX_DESCRIPTION_LENGTH, SiteConfig
from .image_utils import normalize_image_url

DEBUG_META_NAME = 'ogp-debug'

# (attribute, value) selectors and the display field written to their content
META_TARGETS = [
    ('name', 'description', 'description'),
    ('property', 'og:title', 'site_title'),
    ('property', 'og:description', 'description'),
    ('property', 'og:image', 'image'),
    ('name', 'twitter:title', 'site_title'),
    ('name', 'twitter:description', 'description'),
    ('name', 'twitter:image', 'image'),
]

_LINE_BREAK_RE = re.compile(r'[\r\n]')
_NEWLINE_RE = re.compile(r'\n')
_START_TAG_RE = re.compile(r'''<([A-Za-z][^\s/>]*)(?:"[^"]*"|'[^']*'|[^'">])*>''')
_ATTRIBUTE_RE = re.compile(r'''([^\s"'<>/=]+)(?:\s*=\s*(?:"[^"]*"|'[^']*'|[^\s"'=<>`]+))?''')
_TITLE_END_RE = re.compile(r'</title\s*>', re.IGNORECASE)
_HEAD_END_RE = re.compile(r'</head\s*>', re.IGNORECASE)


def normalize_locale(lang: Optional[str]) -> str:
    """Return 'en' for lang=en, otherwise the default locale."""
    return 'en' if lang == 'en' else DEFAULT_LOCALE


def sanitize_description(text: str, max_length: int = MAX_DESCRIPTION_LENGTH) -> str:
    """Strip line breaks and cut to max_length characters."""
    return _LINE_BREAK_RE.sub('', text or '')[:max_length]


def build_display_fields(record: Dict[str, str], locale: str, config: SiteConfig) -> Dict[str, str]:
    """
    Derive what the page head should show for a spot.

    Returns dict with:
        title: Localized spot title
        site_title: "{title} | {site suffix}"
        description: Sanitized localized description (or generated fallback)
        image: Embeddable image URL (or the configured fallback image)
    """
    if locale == 'en':
        title = record.get('title_en') or record.get('title', '')
        description = (
            record.get('description_en') or
            record.get('description') or
            config.description_fallback('en', title)
        )
    else:
        title = record.get('title', '')
        description = record.get('description') or config.description_fallback(locale, title)

    image = normalize_image_url(record.get('image', ''), config.thumbnail_width)

    return {
        'title': title,
        'site_title': f"{title} | {config.site_suffix(locale)}",
        'description': sanitize_description(description, config.description_max_length),
        'image': image or config.fallback_image_url,
    }


def _line_offsets(html: str) -> List[int]:
    # html.parser reports positions as (line, column) with lines split on \n
    return [0] + [match.end() for match in _NEWLINE_RE.finditer(html)]


def _start_tag_span(html: str, offsets: List[int], tag: Tag) -> Optional[Tuple[int, int]]:
    """Locate the source span of a parsed tag's start tag, e.g. <meta ...>."""
    if tag.sourceline is None or tag.sourcepos is None:
        return None
    start = offsets[tag.sourceline - 1] + tag.sourcepos
    match = _START_TAG_RE.match(html, start)
    if not match or match.group(1).lower() != tag.name:
        return None
    return match.start(), match.end()


def _set_attribute(tag_html: str, name: str, value: str) -> str:
    """Replace one attribute value inside a start tag, adding it if absent."""
    quoted = '"%s"' % escape(value, quote=True)
    name_end = _START_TAG_RE.match(tag_html).end(1)
    for match in _ATTRIBUTE_RE.finditer(tag_html, name_end):
        if match.group(1).lower() == name:
            return tag_html[:match.start()] + f'{match.group(1)}={quoted}' + tag_html[match.end():]
    close = len(tag_html) - (2 if tag_html.endswith('/>') else 1)
    return tag_html[:close].rstrip() + f' {name}={quoted}' + tag_html[close:]


def _apply_edits(html: str, edits: List[Tuple[int, int, str]]) -> str:
    for start, end, replacement in sorted(edits, reverse=True):
        html = html[:start] + replacement + html[end:]
    return html


def _debug_meta_edit(html: str, status: str) -> Optional[Tuple[int, int, str]]:
    head_end = _HEAD_END_RE.search(html)
    if not head_end:
        return None
    tag = f'<meta name="{DEBUG_META_NAME}" content="{escape(status, quote=True)}">'
    return head_end.start(), head_end.start(), tag


def rewrite_meta_tags(
    html: str,
    fields: Dict[str, str],
    canonical_url: Optional[str] = None,
    debug_status: Optional[str] = None,
) -> str:
    """
    Rewrite title, description, OGP and Twitter Card tags in place.

    Only the targeted spans change: the text inside <title> and the content
    (or href) attribute of each matched tag. Every other byte of the document,
    including its original tag formatting, is returned as it came in.

    Args:
        html: Original HTML document
        fields: Output of build_display_fields()
        canonical_url: When set, becomes the href of <link rel="canonical">
        debug_status: When set, inserted before </head> as an ogp-debug meta tag

    Returns:
        The rewritten HTML document
    """
    soup = BeautifulSoup(html, 'html.parser')
    offsets = _line_offsets(html)
    edits = []
    start_tags = {}

    def replace_attribute(tag, name, value):
        span = _start_tag_span(html, offsets, tag)
        if span:
            # one tag can match several selectors
            source = start_tags.get(span, html[span[0]:span[1]])
            start_tags[span] = _set_attribute(source, name, value)

    for title_tag in soup.find_all('title'):
        span = _start_tag_span(html, offsets, title_tag)
        if not span:
            continue
        close = _TITLE_END_RE.search(html, span[1])
        if close:
            edits.append((span[1], close.start(), escape(fields['site_title'], quote=False)))

    for attr, value, field_name in META_TARGETS:
        for tag in soup.find_all('meta', attrs={attr: value}):
            replace_attribute(tag, 'content', fields[field_name])

    if canonical_url:
        for link in soup.find_all('link', rel='canonical'):
            replace_attribute(link, 'href', canonical_url)

    if debug_status:
        edit = _debug_meta_edit(html, debug_status)
        if edit:
            edits.append(edit)

    edits.extend((start, end, source) for (start, end), source in start_tags.items())
    return _apply_edits(html, edits)


def add_debug_tag(html: str, status: str) -> str:
    """Insert only the ogp-debug meta tag before </head>, leaving everything else untouched."""
    edit = _debug_meta_edit(html, status)
    if edit is None:
        return html
    return _apply_edits(html, [edit])
