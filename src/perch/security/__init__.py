"""Security helpers for request data.

Usage::

    from perch.security import sanitize

    sanitize('<script>alert("x")</script>')
    # '[removed]alert&#40;"x"&#41;[removed]'
"""

from perch.security.xss import sanitize, sanitize_value

__all__ = [
    "sanitize",
    "sanitize_value",
]
