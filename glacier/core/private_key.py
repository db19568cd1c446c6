"""Private key normalisation and validation."""

import re

from glacier.core.errors import InvalidPrivateKey

_KEY_PATTERN = re.compile(r"^[a-fA-F0-9]{64}$")
_PREFIX = "0x"


def normalize_private_key(raw: str | None) -> str:
    """Return the key without its optional ``0x`` prefix.

    Surrounding whitespace is dropped the way a shell ``read`` would drop it.
    Case is preserved. Raises InvalidPrivateKey when the remainder is not
    exactly 64 hexadecimal characters.
    """
    key = (raw or "").strip()
    if key.startswith(_PREFIX):
        key = key[len(_PREFIX):]
    if not _KEY_PATTERN.match(key):
        raise InvalidPrivateKey()
    return key


def mask_private_key(key: str) -> str:
    """Short form safe for logs, e.g. ``abcd…6789``."""
    if len(key) <= 8:
        return "*" * len(key)
    return f"{key[:4]}…{key[-4:]}"
