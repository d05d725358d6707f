"""Proxy path convention shared by every request the client builds.

All calls leave through the ingress as ``/meta/proxy/<host><path>`` where
``<host>`` is the upstream URL with its scheme removed.
"""

from __future__ import annotations

import re
from typing import Iterable

PROXY_PREFIX = '/meta/proxy/'

_SCHEME_RE = re.compile(r'^https?://', re.IGNORECASE)


def strip_scheme(url: str) -> str:
    """Drop a leading ``http://`` or ``https://``."""
    return _SCHEME_RE.sub('', url.strip())


def proxy_url(upstream: str, path: str = '') -> str:
    """Build the relative proxied URL for ``upstream`` + ``path``."""
    host = strip_scheme(upstream)
    return f'{PROXY_PREFIX}{host}{path}'


def join_query(pairs: Iterable[tuple[str, str]]) -> str:
    """``a=1&b=2`` without re-encoding; values are trusted literals."""
    return '&'.join(f'{key}={value}' for key, value in pairs)
