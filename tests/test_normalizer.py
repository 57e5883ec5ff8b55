import pytest

from varnisher.core.models import RejectionReason, Target
from varnisher.core.scraping.normalizer import absolutize, encode_url, resolve_resource

BASE = Target.from_url("http://example.com/a/b/page.html")


def test_host_relative_is_prefixed_with_origin():
    r = resolve_resource("/img/x.png", BASE)
    assert r.accepted
    assert r.url == "http://example.com/img/x.png"


def test_path_relative_uses_page_directory():
    for c in ["app.js", "js/app.js", "../up.css"]:
        r = resolve_resource(c, BASE)
        assert r.accepted
        assert r.url == "http://example.com/a/b/" + c


def test_path_relative_without_directory():
    base = Target.from_url("http://example.com")
    assert absolutize("x.png", base) == "http://example.com/x.png"

    root_page = Target.from_url("http://example.com/index.html")
    assert resolve_resource("x.png", root_page).url == "http://example.com/x.png"


def test_absolute_same_origin_is_unchanged():
    url = "http://example.com/static/site.css?v=3"
    r = resolve_resource(url, BASE)
    assert r.accepted
    assert r.url == url


def test_https_same_host_is_rejected():
    r = resolve_resource("https://example.com/x", BASE)
    assert not r.accepted
    assert r.rejection == RejectionReason.NON_HTTP


def test_other_host_is_rejected():
    r = resolve_resource("http://otherhost/x", BASE)
    assert not r.accepted
    assert r.rejection == RejectionReason.CROSS_ORIGIN

    # no subdomain matching
    r = resolve_resource("http://cdn.example.com/x", BASE)
    assert r.rejection == RejectionReason.CROSS_ORIGIN


def test_unparsable_candidate_is_rejected_not_raised():
    r = resolve_resource("http://[::1/broken", BASE)
    assert not r.accepted
    assert r.rejection == RejectionReason.UNPARSABLE


def test_candidate_whitespace_is_stripped():
    r = resolve_resource("  /img/x.png\n", BASE)
    assert r.url == "http://example.com/img/x.png"


def test_encode_url_quotes_spaces():
    p = encode_url(" http://example.com/my page.html ")
    assert p.path == "/my%20page.html"
    assert p.hostname == "example.com"


def test_encode_url_requires_absolute_url():
    with pytest.raises(ValueError):
        encode_url("not a url")


def test_ipv6_target_resolves_with_brackets():
    base = Target.from_url("http://[::1]/a/index.html")
    assert base.host == "[::1]"
    assert base.hostname == "::1"

    r = resolve_resource("/img/x.png", base)
    assert r.accepted
    assert r.url == "http://[::1]/img/x.png"

    r = resolve_resource("js/app.js", base)
    assert r.url == "http://[::1]/a/js/app.js"

    assert resolve_resource("http://[::2]/x", base).rejection == (
        RejectionReason.CROSS_ORIGIN
    )


def test_host_comparison_ignores_case():
    base = Target.from_url("http://Example.COM/index.html")
    assert resolve_resource("http://example.com/x.png", base).accepted
