"""XSS sanitization for user-supplied parameter values.

A blacklist filter in the classic ``xss_clean`` tradition: it does not
parse HTML, it neutralizes the substrings browsers execute. Applied to
every query and path parameter before an action sees it.

The passes run in a fixed order; later passes assume earlier ones ran
(script tags are already ``[removed]`` by the time naughty elements are
entity-escaped).
"""

import re
from typing import Any

REMOVED = "[removed]"

# Control characters and their URL-encoded forms (keeps \t, \n, \r)
_NON_DISPLAYABLE = (
    re.compile(r"%0[0-8bcef]", re.IGNORECASE),
    re.compile(r"%1[0-9a-f]", re.IGNORECASE),
    re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]"),
)

_NEVER_ALLOWED_STR: dict[str, str] = {
    "document.cookie": REMOVED,
    "document.write": REMOVED,
    ".parentNode": REMOVED,
    ".innerHTML": REMOVED,
    "window.location": REMOVED,
    "-moz-binding": REMOVED,
    "<!--": "&lt;!--",
    "-->": "--&gt;",
    "<![CDATA[": "&lt;![CDATA[",
}

_NEVER_ALLOWED_RE = (
    re.compile(r"javascript\s*:", re.IGNORECASE),
    re.compile(r"vbscript\s*:", re.IGNORECASE),
    re.compile(r"expression\s*(\(|&#40;)", re.IGNORECASE),
    re.compile(r"Redirect\s+302", re.IGNORECASE),
)

# <script ...>, </script>, <xss> markers, attributes included
_SCRIPT_TAG = re.compile(r"<(/*)\s*(script|xss)\b(.*?)>", re.IGNORECASE | re.DOTALL)

_NAUGHTY_ELEMENT = re.compile(
    r"<(/*\s*)(alert|applet|audio|basefont|base|behavior|bgsound|blink|body|embed"
    r"|expression|form|frameset|frame|head|html|ilayer|iframe|input|isindex|layer"
    r"|link|meta|object|plaintext|style|textarea|title|video|xml)\b([^>]*)>",
    re.IGNORECASE,
)

# Unanchored: "xalert(1)" is escaped too
_NAUGHTY_CALL = re.compile(
    r"(alert|cmd|passthru|eval|exec|expression|system|fopen|fsockopen|file"
    r"|file_get_contents|readfile|unlink)(\s*)\((.*?)\)",
    re.IGNORECASE | re.DOTALL,
)


def sanitize(value: str) -> str:
    """Neutralize script-injection substrings in *value*.

    Never raises; the empty string comes back unchanged::

        >>> sanitize('<script>alert("foo")</script>')
        '[removed]alert&#40;"foo"&#41;[removed]'
        >>> sanitize("plain text (with parens)")
        'plain text (with parens)'
    """
    if not value:
        return value

    for pattern in _NON_DISPLAYABLE:
        value = pattern.sub("", value)

    for needle, replacement in _NEVER_ALLOWED_STR.items():
        value = value.replace(needle, replacement)
    for pattern in _NEVER_ALLOWED_RE:
        value = pattern.sub(REMOVED, value)

    value = _SCRIPT_TAG.sub(REMOVED, value)
    value = _NAUGHTY_ELEMENT.sub(r"&lt;\1\2\3&gt;", value)
    return _NAUGHTY_CALL.sub(r"\1\2&#40;\3&#41;", value)


def sanitize_value(value: Any) -> Any:
    """Sanitize strings, and strings inside lists and tuples.

    Non-string values (ints from a framework's converters, ``None``)
    pass through unchanged.
    """
    if isinstance(value, str):
        return sanitize(value)
    if isinstance(value, list):
        return [sanitize_value(v) for v in value]
    if isinstance(value, tuple):
        return tuple(sanitize_value(v) for v in value)
    return value
