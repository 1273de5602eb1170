"""
Log injection guard (CWE-117)

Incident titles, actor names and source IPs reach the logs verbatim from
requests and threat signals. They are passed through sanitize_for_log so a
crafted value cannot forge extra log lines or smuggle control characters.
"""

import re
from typing import Any, Optional

# CR/LF (raw, URL-encoded or escaped), NUL and the other C0 controls plus DEL
_INJECTION = re.compile(r"[\r\n]|%0[adAD]|\\[rn]|[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")

# Everything outside what titles, user names and IPv4/IPv6 addresses need
_UNSAFE = re.compile(r"[^\w.@:/#()\[\],'\- ]")

DEFAULT_MAX_LENGTH = 120


def sanitize_for_log(value: Optional[Any], max_length: int = DEFAULT_MAX_LENGTH) -> str:
    """
    Render a user-controlled value safe for a single log line.

    Example:
        >>> sanitize_for_log("alice\\nADMIN LOGIN OK")
        'aliceADMIN LOGIN OK'
        >>> sanitize_for_log(None)
        'null'
    """
    if value is None:
        return "null"

    text = str(value)
    if len(text) > max_length:
        text = text[:max_length] + "..."

    text = _UNSAFE.sub("", _INJECTION.sub("", text)).strip()
    return text or "[sanitized]"
