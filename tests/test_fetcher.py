import requests

from varnisher.core.config import PurgerConfig
from varnisher.core.models import FailureReason
from varnisher.core.scraping.fetcher import Fetcher


class DummyResponse:
    def __init__(self, text: str, status_code: int = 200):
        self.text = text
        self.status_code = status_code


def test_fetch_page_sends_fixed_headers(monkeypatch):
    calls = {}

    def fake_get(self, url, headers=None, timeout=None, **kwargs):
        calls["url"] = url
        calls["headers"] = headers
        calls["timeout"] = timeout
        return DummyResponse("<html></html>")

    monkeypatch.setattr(requests.Session, "get", fake_get)

    f = Fetcher.from_config(PurgerConfig(fetch_timeout=7))
    result = f.fetch_page("http://example.com/a/index.html")

    assert result.ok
    assert result.body == "<html></html>"
    assert result.status_code == 200
    assert calls["url"] == "http://example.com/a/index.html"
    assert calls["timeout"] == 7
    assert calls["headers"]["Accept-Charset"] == "utf-8"
    assert calls["headers"]["Accept"] == "text/html"
    assert calls["headers"]["User-Agent"].startswith("Mozilla/5.0")


def test_fetch_page_encodes_url(monkeypatch):
    seen = []

    def fake_get(self, url, headers=None, timeout=None, **kwargs):
        seen.append(url)
        return DummyResponse("")

    monkeypatch.setattr(requests.Session, "get", fake_get)

    Fetcher().fetch_page("  http://example.com/my page.html ")
    assert seen == ["http://example.com/my%20page.html"]


def test_fetch_page_unparsable_url_does_no_io(monkeypatch):
    def fake_get(self, url, **kwargs):
        raise AssertionError("network must not be touched")

    monkeypatch.setattr(requests.Session, "get", fake_get)

    result = Fetcher().fetch_page("not a url")
    assert not result.ok
    assert result.failure == FailureReason.UNPARSABLE_URL
    assert result.body is None


def test_fetch_page_network_error(monkeypatch):
    def fake_get(self, url, **kwargs):
        raise requests.ConnectionError("connection refused")

    monkeypatch.setattr(requests.Session, "get", fake_get)

    result = Fetcher().fetch_page("http://example.com/")
    assert result.failure == FailureReason.FETCH_ERROR
    assert "refused" in result.detail


def test_status_code_is_not_interpreted(monkeypatch):
    monkeypatch.setattr(
        requests.Session,
        "get",
        lambda self, url, **kwargs: DummyResponse("<p>gone</p>", status_code=404),
    )

    result = Fetcher().fetch_page("http://example.com/missing")
    assert result.ok
    assert result.status_code == 404


def test_fetcher_never_retries():
    f = Fetcher.from_config(PurgerConfig())
    for scheme in ("http://example.com/", "https://example.com/"):
        assert f.session.get_adapter(scheme).max_retries.total == 0


def test_fetch_page_issues_a_single_request(monkeypatch):
    calls = []

    def fake_get(self, url, **kwargs):
        calls.append(url)
        raise requests.Timeout("read timed out")

    monkeypatch.setattr(requests.Session, "get", fake_get)

    result = Fetcher().fetch_page("http://example.com/")
    assert result.failure == FailureReason.FETCH_ERROR
    assert calls == ["http://example.com/"]
