"""
Input sanitization utilities for EcoTask API endpoints.
Provides protection against XSS and malformed text in user-supplied fields.
"""

import re
import html
from typing import Optional
import logging

MAX_LABEL_LENGTH = 100

def sanitize_string(input_str: str, max_length: Optional[int] = None) -> str:
    """
    Sanitize a string input by:
    1. Stripping leading/trailing whitespace
    2. HTML escaping to prevent XSS
    3. Removing control characters
    4. Truncating to max_length if specified

    Args:
        input_str: The input string to sanitize
        max_length: Optional maximum length for truncation

    Returns:
        Sanitized string
    """
    if not isinstance(input_str, str):
        if input_str is None:
            return ""
        return str(input_str)

    sanitized = input_str.strip()

    sanitized = html.escape(sanitized)

    # Remove control characters (except tab, newline, carriage return)
    sanitized = re.sub(r'[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]', '', sanitized)

    if max_length and len(sanitized) > max_length:
        sanitized = sanitized[:max_length]
        logging.warning(f"Input truncated from {len(input_str)} to {max_length} characters")

    return sanitized

def sanitize_label(label: str) -> str:
    """
    Expected labels are compared against labeler output, so they are not
    HTML escaped. Control characters are dropped and inner whitespace collapsed.
    """
    if not isinstance(label, str):
        return ""
    cleaned = re.sub(r'[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]', '', label)
    cleaned = re.sub(r'\s+', ' ', cleaned).strip()
    return cleaned[:MAX_LABEL_LENGTH]
