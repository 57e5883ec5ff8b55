import os

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_7_2) AppleWebKit/535.2 "
    "(KHTML, like Gecko) Chrome/15.0.874.106 Safari/535.2"
)


def _default_workers() -> int:
    return os.cpu_count() or 4


class PurgerConfig(BaseModel):
    """
    Run configuration for a page purge.

    Built once at startup and passed explicitly to the purger; the model is
    frozen so nothing can change the proxy endpoint mid-run.
    """

    model_config = ConfigDict(frozen=True)

    # Proxy (Varnish) endpoint that receives the PURGE requests
    proxy_hostname: str = "localhost"
    proxy_port: int = Field(default=80, ge=1, le=65535)

    # Per-URL progress lines go to INFO when verbose, DEBUG otherwise
    verbose: bool = False

    # Upper bound on concurrent purge connections during dispatch
    max_workers: int = Field(default_factory=_default_workers, ge=1)

    fetch_timeout: float = Field(default=15, gt=0)
    purge_timeout: float = Field(default=10, gt=0)
    user_agent: str = DEFAULT_USER_AGENT

    @field_validator("proxy_hostname")
    def proxy_hostname_must_not_be_blank(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("proxy_hostname must not be empty")
        return v

    @property
    def proxy_address(self) -> tuple[str, int]:
        """(host, port) pair as accepted by `socket.create_connection`."""
        return (self.proxy_hostname, self.proxy_port)
