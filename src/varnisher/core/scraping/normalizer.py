"""URL normalizer utilities.

Turns raw `href`/`src` values into absolute URLs against the target page and
decides whether they are purgeable (plain HTTP, same host as the target).
"""

from __future__ import annotations

import re
from urllib.parse import SplitResult, urlsplit

from requests.utils import requote_uri

from varnisher.core.models import RejectionReason, Resolution, Target

_ABSOLUTE_URL = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*://")


def encode_url(url: str) -> SplitResult:
    """Strip and percent-encode `url`, then split it.

    Raises ValueError when the result has no scheme or host.
    """
    encoded = requote_uri(str(url).strip())
    p = urlsplit(encoded)
    if not p.scheme or not p.hostname:
        raise ValueError(f"not an absolute URL: {url!r}")
    return p


def _directory(path: str) -> str:
    # everything before the final "/"; "" when the path has none
    head, sep, _ = path.rpartition("/")
    return head if sep else ""


def absolutize(candidate: str, base: Target) -> str:
    """Make `candidate` absolute relative to `base` without filtering it."""
    origin = f"{base.scheme}://{base.host}"
    if candidate.startswith("/"):
        return origin + candidate
    if not _ABSOLUTE_URL.match(candidate):
        return f"{origin}{_directory(base.path)}/{candidate}"
    return candidate


def resolve_resource(candidate: str, base: Target) -> Resolution:
    """Resolve a resource reference and classify it as purgeable or not.

    Host-relative (`/img/x.png`) and path-relative (`js/app.js`) references are
    made absolute against `base`; absolute ones are kept as they are. Only
    `http` URLs on exactly `base.host` are accepted.
    """
    raw = str(candidate).strip()
    url = absolutize(raw, base)

    try:
        p = urlsplit(url)
        host = p.hostname
    except ValueError:
        return Resolution(candidate=raw, rejection=RejectionReason.UNPARSABLE)

    if p.scheme != "http":
        return Resolution(candidate=raw, url=url, rejection=RejectionReason.NON_HTTP)
    if host != base.hostname:
        return Resolution(
            candidate=raw, url=url, rejection=RejectionReason.CROSS_ORIGIN
        )
    return Resolution(candidate=raw, url=url)
