# utils package
from .constants import (
    APP_VERSION, CANON_HEADERS, HIERARCHY_HEADERS, ALL_CATEGORIES, TAB_ICONS
)
from .helpers import (
    normalize_text, coerce_number, coerce_timestamp, is_missing_parent,
    ensure_columns, drop_blank_names
)

__all__ = [
    'APP_VERSION', 'CANON_HEADERS', 'HIERARCHY_HEADERS', 'ALL_CATEGORIES', 'TAB_ICONS',
    'normalize_text', 'coerce_number', 'coerce_timestamp', 'is_missing_parent',
    'ensure_columns', 'drop_blank_names'
]
