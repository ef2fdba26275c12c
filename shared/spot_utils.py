"""
Spot lookup over parsed CSV rows.

The first row is the header. Header cells are mapped to canonical roles by
keyword containment, so columns like "Title (タイトル)" or "desc_en" resolve
without an exact header name. Titles are compared with all whitespace
removed, half-width and full-width alike, but otherwise exactly.
"""

import re
from typing import Dict, List, Optional, Sequence

# Order matters: the first role with a matching keyword claims the column,
# so the _en variants must be checked before their base roles.
ROLE_KEYWORDS = (
    ('image', ('image', '画像')),
    ('description_en', ('desc_en', 'description_en', '紹介_en')),
    ('description', ('desc', '紹介', '説明')),
    ('title_en', ('title_en', 'タイトル_en')),
    ('title', ('title', 'タイトル')),
)

SPOT_ROLES = tuple(role for role, _ in ROLE_KEYWORDS)

_WHITESPACE_RE = re.compile(r'[\s　]+')


def _clean(value: str) -> str:
    """Trim half-width and full-width whitespace."""
    return (value or '').strip()


def title_key(title: str) -> str:
    """Comparison key for a title: every whitespace character removed."""
    if not title:
        return ''
    return _WHITESPACE_RE.sub('', title)


def header_role(header: str) -> Optional[str]:
    """Return the canonical role for a single header cell, or None."""
    name = _clean(header).lower()
    if not name:
        return None

    for role, keywords in ROLE_KEYWORDS:
        if any(keyword in name for keyword in keywords):
            return role
    return None


def resolve_header_roles(header_row: Sequence[str]) -> Dict[str, int]:
    """
    Map canonical roles to column positions.

    When several columns resolve to the same role, the leftmost one keeps it.

    Examples:
        >>> resolve_header_roles(['Title', 'title_en', 'desc', 'image'])
        {'title': 0, 'title_en': 1, 'description': 2, 'image': 3}
    """
    roles = {}
    for index, header in enumerate(header_row):
        role = header_role(header)
        if role and role not in roles:
            roles[role] = index
    return roles


def _cell(row: Sequence[str], index: Optional[int]) -> str:
    if index is None or index >= len(row):
        return ''
    return _clean(row[index])


def build_spot_record(row: Sequence[str], roles: Dict[str, int]) -> Dict[str, str]:
    """Map a data row into a record holding every spot role ('' when absent)."""
    return {role: _cell(row, roles.get(role)) for role in SPOT_ROLES}


def find_spot(rows: List[List[str]], target_title: str) -> Optional[Dict[str, str]]:
    """
    Find the first data row whose title matches target_title.

    Args:
        rows: Parsed CSV rows, header first
        target_title: Title requested through the spot query parameter

    Returns:
        Dict with title, title_en, description, description_en and image,
        or None when the header has no title column or nothing matches.
    """
    if not rows or len(rows) < 2:
        return None

    roles = resolve_header_roles(rows[0])
    title_index = roles.get('title')
    if title_index is None:
        return None

    target = title_key(target_title)
    if not target:
        return None

    for row in rows[1:]:
        if not row or len(row) <= title_index:
            continue
        if not any(cell.strip() for cell in row):
            continue

        if title_key(_clean(row[title_index])) == target:
            return build_spot_record(row, roles)

    return None
