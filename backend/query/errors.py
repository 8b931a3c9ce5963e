from __future__ import annotations


class SearchError(Exception):
    """Base class for failures while resolving a search."""


class TransportError(SearchError):
    """The query endpoint could not be reached or answered with garbage."""


class ServerError(SearchError):
    """The query endpoint answered with an explicit error payload."""


class GeocoderError(SearchError):
    """The fallback geocoder failed."""
