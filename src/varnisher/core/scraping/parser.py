"""HTML parsing helpers: embedded resource discovery.
"""

from __future__ import annotations

from typing import Iterator, NamedTuple, Optional, Tuple

from bs4 import BeautifulSoup
from bs4.builder import ParserRejectedMarkup
from bs4.element import Tag


class ResourceRule(NamedTuple):
    name: str
    selector: str
    attribute: str


# Applied in this order; each rule is a CSS selector plus the attribute to read
RESOURCE_RULES = (
    ResourceRule("stylesheet", "link[rel*=stylesheet]", "href"),
    ResourceRule("JavaScript file", "script[src]", "src"),
    ResourceRule("image file", "img[src]", "src"),
)


def parse_document(body: Optional[str]) -> Optional[BeautifulSoup]:
    """Parse a fetched body, returning None when there is nothing to parse."""
    if not body:
        return None
    try:
        return BeautifulSoup(body, "html.parser")
    except ParserRejectedMarkup:
        return None

def iter_resources(document: Optional[Tag]) -> Iterator[Tuple[ResourceRule, str]]:
    """Yield (rule, reference) pairs for every resource found in `document`.

    Anything that is not a parsed tree yields nothing. Matched elements
    without the expected attribute are skipped.
    """
    if not isinstance(document, Tag):
        return

    for rule in RESOURCE_RULES:
        for el in document.select(rule.selector):
            value = el.get(rule.attribute)
            if value is None:
                continue
            if isinstance(value, list):
                value = " ".join(value)
            yield rule, str(value)


def extract_resources(document: Optional[Tag]) -> Iterator[str]:
    """Yield raw resource references (`href`/`src` values) from `document`."""
    for _, value in iter_resources(document):
        yield value
