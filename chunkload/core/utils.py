import itertools
import mimetypes
import random
import time
from typing import Any, Mapping
from urllib.parse import quote, urlencode

_BASE32_DIGITS = '0123456789abcdefghijklmnopqrstuv'
_guid_counter = itertools.count()

DEFAULT_MIME_TYPE = 'application/octet-stream'


def to_base32(value: int) -> str:
    """Formats a non-negative integer in base 32 (0-9a-v)."""
    if value < 0:
        raise ValueError("value must be non-negative")
    if value == 0:
        return '0'
    digits = []
    while value:
        value, rem = divmod(value, 32)
        digits.append(_BASE32_DIGITS[rem])
    return ''.join(reversed(digits))


def guid(prefix: str = 'p') -> str:
    """Generates a process-unique id: time, random salt and a counter."""
    result = to_base32(int(time.time() * 1000))
    for _ in range(5):
        result += to_base32(random.randrange(65535))
    return prefix + result + to_base32(next(_guid_counter))


def build_url(url: str, items: Mapping[str, Any]) -> str:
    """Appends url-encoded query items to a URL."""
    if not items:
        return url
    query = urlencode({name: str(value) for name, value in items.items()}, quote_via=quote)
    separator = '&' if '?' in url else '?'
    return url + separator + query


def mime_type_for(file_name: str) -> str:
    """Guesses a MIME type from the file extension."""
    mime_type, _ = mimetypes.guess_type(file_name, strict=False)
    return mime_type or DEFAULT_MIME_TYPE


def percentage_of(loaded: int, size: int, complete: bool) -> float:
    """Progress in percent; an empty file is at 100 only once it completed."""
    if size == 0:
        return 100.0 if complete else 0.0
    return (loaded / size) * 100
