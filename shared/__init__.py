"""Shared utilities for the spot OGP rewriter."""

from .config import (
    DEFAULT_LOCALE,
    SUPPORTED_LOCALES,
    SiteConfig,
    load_config,
)

from .csv_utils import parse_csv

from .spot_utils import (
    ROLE_KEYWORDS,
    SPOT_ROLES,
    title_key,
    header_role,
    resolve_header_roles,
    build_spot_record,
    find_spot,
)

from .image_utils import (
    is_drive_url,
    extract_drive_file_id,
    normalize_image_url,
)

from .meta_utils import (
    DEBUG_META_NAME,
    normalize_locale,
    sanitize_description,
    build_display_fields,
    rewrite_meta_tags,
    add_debug_tag,
)

__all__ = [
    # Configuration
    'DEFAULT_LOCALE',
    'SUPPORTED_LOCALES',
    'SiteConfig',
    'load_config',
    # CSV parsing
    'parse_csv',
    # Spot lookup
    'ROLE_KEYWORDS',
    'SPOT_ROLES',
    'title_key',
    'header_role',
    'resolve_header_roles',
    'build_spot_record',
    'find_spot',
    # Image URLs
    'is_drive_url',
    'extract_drive_file_id',
    'normalize_image_url',
    # Head metadata
    'DEBUG_META_NAME',
    'normalize_locale',
    'sanitize_description',
    'build_display_fields',
    'rewrite_meta_tags',
    'add_debug_tag',
]
