"""Common literal values used across register_pages.

These constants keep option names, metadata keys, and the attribute mapping
table centralized so the registry, installer, and tests can import the same
values without drifting. Intended for internal use within the
register_pages package.

Examples
--------
>>> from register_pages import _constants
>>> _constants.PER_KEY_OPTION_TEMPLATE.format(key="checkout")
'checkout_page'
>>> _constants.FIELD_MAP["title"]
'post_title'
"""

import re

LIBRARY_VERSION = "1.0.0"

KEY_PATTERN = re.compile(r"[a-z0-9_-]+")

FIELD_MAP: dict[str, str] = {
    "title": "post_title",
    "content": "post_content",
    "parent": "post_parent",
    "status": "post_status",
    "type": "post_type",
    "author": "post_author",
    "menu_order": "menu_order",
    "menuOrder": "menu_order",
}

REQUIRED_FIELDS = ("title", "content")
TEMPLATE_FIELDS = ("title", "content")

DEFAULT_ATTRIBUTES: dict[str, object] = {
    "status": "publish",
    "type": "page",
    "author": 0,
    "comment_status": "closed",
    "ping_status": "closed",
    "parent": 0,
    "menu_order": 0,
}

PAGES_OPTION = "pages"
INSTALLED_OPTION = "pages_installed"
VERSION_OPTION = "pages_version"
BACKUP_OPTION = "pages_backup"
PER_KEY_OPTION_TEMPLATE = "{key}_page"

PAGE_VERSION_META = "_page_version"
PAGE_CONFIG_META = "_page_config"
