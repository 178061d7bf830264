import html
from typing import Optional

import bleach


def sanitize_string(value: Optional[str]) -> Optional[str]:
    """
    Sanitize a string by escaping HTML special characters to prevent XSS.
    Returns None if input is None.
    """
    if value is None:
        return None
    if not isinstance(value, str):
        return value
    return html.escape(str(value), quote=True)


def escape_cell(value) -> str:
    """Escape &, < and > in spreadsheet cell text; None renders empty"""
    if value is None:
        return ""
    return str(value).replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def strip_html_tags(html_content: Optional[str]) -> str:
    """
    Plain-text rendering of an HTML fragment: tags removed, entities decoded.
    Used as the text/plain fallback of outgoing email.
    """
    if not html_content:
        return ""
    stripped = bleach.clean(html_content, tags=set(), attributes={}, strip=True)
    return html.unescape(stripped)
