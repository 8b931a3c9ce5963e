from __future__ import annotations

from dataclasses import dataclass, field

from query.types import ResultItem
from viewport.types import MarkerHandle, OverlayHandle


@dataclass
class SessionState:
    """
    Map artifacts and results owned by one search session.

    At most one coordinate marker and one highlight overlay set exist at a time;
    every writer removes the previous owner's artifacts before adding its own.
    """

    marker: MarkerHandle | None = None
    highlight: list[OverlayHandle] = field(default_factory=list)
    results: tuple[ResultItem, ...] = ()
    panel_open: bool = False
