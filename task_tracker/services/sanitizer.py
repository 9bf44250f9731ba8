"""Pattern-based sanitization for free-text task fields.

This is a deny-list filter, not an HTML parser. It strips script blocks,
self-closing script tags, ``javascript:`` prefixes and inline ``on*=`` event
handler attributes. All other markup (``<b>``, ``<a href>``, ...) is left as
is, so it is not a general XSS guarantee: output must still be escaped when
rendered.
"""

import re
from typing import Optional

# Self-closing tags go first so "<script/>text<script>x</script>" keeps "text".
_PATTERNS = [
    re.compile(r"<script[^>]*/>", re.IGNORECASE),
    re.compile(r"<script[^>]*>.*?</script>", re.IGNORECASE | re.DOTALL),
    re.compile(r"javascript:", re.IGNORECASE),
    # Handler matches start at the beginning of a whitespace run only
    re.compile(r"(?<!\s)\s*\bon\w+\s*=\s*(?:\"[^\"]*\"|'[^']*')", re.IGNORECASE),
    re.compile(r"(?<!\s)\s*\bon\w+\s*=\s*[^\s>]+", re.IGNORECASE),
]


def _strip_once(text: str) -> str:
    for pattern in _PATTERNS:
        text = pattern.sub("", text)
    return text


def sanitize_text(value: Optional[str]) -> Optional[str]:
    """Remove dangerous script constructs from ``value`` and trim it.

    ``None``, empty and whitespace-only values are returned unchanged.
    Removal is repeated until the text stops changing, so a removal cannot
    splice together a new match and the function is idempotent.
    """
    if value is None or not value.strip():
        return value

    sanitized = value
    while True:
        stripped = _strip_once(sanitized)
        if stripped == sanitized:
            break
        sanitized = stripped

    return sanitized.strip()
