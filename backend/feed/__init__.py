"""Provider feed access: authenticated fetch, gzip handling, JSON/XML trees."""

from .client import FeedClient, HttpCallSink
from .xml_tree import parse_xml

__all__ = ["FeedClient", "HttpCallSink", "parse_xml"]
