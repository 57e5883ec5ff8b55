"""Value types shared by the purge pipeline.

Every failure in the pipeline is carried as one of these values instead of an
exception: the resolver returns a `Resolution`, the fetcher a `FetchResult`
and the purge client a `PurgeOutcome`. `PagePurger` aggregates them into a
`PurgeReport`.
"""

from __future__ import annotations

from enum import Enum
from typing import List, Optional
from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict, Field


class FailureReason(str, Enum):
    UNPARSABLE_URL = "unparsable_url"
    FETCH_ERROR = "fetch_error"
    PROXY_REJECTED = "proxy_rejected"
    CONNECTION_ERROR = "connection_error"


class RejectionReason(str, Enum):
    UNPARSABLE = "unparsable"
    NON_HTTP = "non_http"
    CROSS_ORIGIN = "cross_origin"


def url_host(hostname: str) -> str:
    """Host as written in a URL or Host header; IPv6 literals keep brackets."""
    return f"[{hostname}]" if ":" in hostname else hostname


class Target(BaseModel):
    """The page a purge run is about: origin plus path."""

    model_config = ConfigDict(frozen=True)

    url: str
    scheme: str
    host: str
    path: str = ""

    @classmethod
    def from_url(cls, url: str) -> "Target":
        """Split `url` into a Target. Raises ValueError without scheme/host."""
        p = urlsplit(url.strip())
        if not p.scheme or not p.hostname:
            raise ValueError(f"not an absolute URL: {url!r}")
        return cls(
            url=url.strip(), scheme=p.scheme, host=url_host(p.hostname), path=p.path
        )

    @property
    def hostname(self) -> str:
        """Host without IPv6 brackets, lowercased, as `urlsplit` reports it."""
        return self.host.strip("[]").lower()


class Resolution(BaseModel):
    candidate: str
    url: Optional[str] = None
    rejection: Optional[RejectionReason] = None

    @property
    def accepted(self) -> bool:
        return self.rejection is None and self.url is not None


class FetchResult(BaseModel):
    url: str
    body: Optional[str] = None
    status_code: Optional[int] = None
    failure: Optional[FailureReason] = None
    detail: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.failure is None


class PurgeOutcome(BaseModel):
    url: str
    success: bool
    reason: Optional[FailureReason] = None
    # status line returned by the proxy, or the error text
    detail: Optional[str] = None

    @classmethod
    def failed(
        cls, url: str, reason: FailureReason, detail: Optional[str] = None
    ) -> "PurgeOutcome":
        return cls(url=url, success=False, reason=reason, detail=detail)


class PurgeReport(BaseModel):
    """Result of one `PagePurger.run`.

    `discovered` counts raw references found on the page, `purgeable` the ones
    left after tidying; `outcomes` holds one entry per dispatched purge in
    completion order.
    """

    target: str
    target_outcome: PurgeOutcome
    fetch_failure: Optional[FetchResult] = None
    discovered: int = 0
    purgeable: int = 0
    outcomes: List[PurgeOutcome] = Field(default_factory=list)

    @property
    def attempted(self) -> int:
        return len(self.outcomes)

    @property
    def succeeded(self) -> int:
        return sum(1 for o in self.outcomes if o.success)

    @property
    def failed(self) -> int:
        return self.attempted - self.succeeded
