"""Plain-text rendering of the backend's rich-text fields."""
import re
from html import unescape
from typing import Optional

PARAGRAPH_OPEN = re.compile(r'<p>')
PARAGRAPH_CLOSE = re.compile(r'</p>')
ANY_TAG = re.compile(r'<[^>]*>')


def strip_html(text: Optional[str]) -> Optional[str]:
    """
    Turn a rich-text fragment into display text.

    Entities are decoded first, paragraphs become line breaks and every
    other tag is dropped. This is a formatting step, not a sanitizer for
    untrusted markup.

    Args:
        text: HTML fragment or None

    Returns:
        Plain text, or None if no text was given
    """
    if text is None:
        return None

    text = unescape(text)
    text = PARAGRAPH_OPEN.sub('', text)
    text = PARAGRAPH_CLOSE.sub('\n', text)
    return ANY_TAG.sub('', text)
