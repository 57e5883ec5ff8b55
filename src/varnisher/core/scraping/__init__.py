"""Core scraping primitives used by the page purger.

Small building blocks: Fetcher, the resource extractor (parser) and the URL
normalizer that decides which resources are purgeable.
"""

from .fetcher import Fetcher
from .normalizer import absolutize, encode_url, resolve_resource
from .parser import (
    RESOURCE_RULES,
    ResourceRule,
    extract_resources,
    iter_resources,
    parse_document,
)

__all__ = [
    "Fetcher",
    "absolutize",
    "encode_url",
    "resolve_resource",
    "RESOURCE_RULES",
    "ResourceRule",
    "extract_resources",
    "iter_resources",
    "parse_document",
]
