"""
Image URL helpers.

Link-preview crawlers cannot render a Google Drive sharing page, so Drive
links are rewritten to the direct thumbnail endpoint. Other hosts (Postimages
and the like) already serve images directly and are left alone.
"""

import re
from urllib.parse import urlparse

from .config import THUMBNAIL_WIDTH

DRIVE_HOSTS = ['drive.google.com']
DRIVE_THUMBNAIL_URL = 'https://drive.google.com/thumbnail?id={file_id}&sz=w{width}'

# Drive file identifiers are long runs of letters, digits, - and _
FILE_ID_RE = re.compile(r'[-A-Za-z0-9_]{25,}')


def is_drive_url(url: str) -> bool:
    """Check if URL points at a Google Drive host."""
    if not url:
        return False
    host = urlparse(url.strip()).netloc.lower()
    return any(host == h or host.endswith('.' + h) for h in DRIVE_HOSTS)


def extract_drive_file_id(url: str) -> str:
    """Extract the Drive file identifier from a URL, or None."""
    if not url:
        return None
    match = FILE_ID_RE.search(url)
    return match.group(0) if match else None


def normalize_image_url(url: str, width: int = THUMBNAIL_WIDTH) -> str:
    """
    Turn a Drive sharing link into an embeddable thumbnail URL.

    Examples:
        >>> normalize_image_url('https://drive.google.com/file/d/ABCDEFGHIJKLMNOPQRSTUVWXY0123/view')
        'https://drive.google.com/thumbnail?id=ABCDEFGHIJKLMNOPQRSTUVWXY0123&sz=w1200'

        >>> normalize_image_url('https://i.postimg.cc/abc/photo.jpg')
        'https://i.postimg.cc/abc/photo.jpg'
    """
    if not url:
        return ''

    if is_drive_url(url):
        file_id = extract_drive_file_id(url)
        if file_id:
            return DRIVE_THUMBNAIL_URL.format(file_id=file_id, width=width)

    return url
