from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Literal

from geo.bounds import Envelope

_EDGE_QUOTES_RE = re.compile(r'^["\s]+|["\s]+$')


class QueryStatus(str, Enum):
    idle = "idle"
    pending = "pending"
    success = "success"
    error = "error"


@dataclass(frozen=True)
class DateInterval:
    begin: datetime
    end: datetime


@dataclass(frozen=True)
class SearchQuery:
    """
    One search attempt. `date_interval` is carried for callers but the layer
    search endpoint has no temporal filter, so it is not sent.
    """

    raw_text: str
    page_size: int | None = None
    date_interval: DateInterval | None = None

    def normalized_text(self) -> str:
        return _EDGE_QUOTES_RE.sub("", self.raw_text or "")


@dataclass(frozen=True)
class HighlightTarget:
    id: str
    label: str
    bbox: Envelope | None


@dataclass(frozen=True)
class ResultItem:
    id: str
    label: str
    bbox: Envelope | None = None
    aux_fields: dict[str, str] = field(default_factory=dict)

    def target(self) -> HighlightTarget:
        return HighlightTarget(id=self.id, label=self.label, bbox=self.bbox)

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "label": self.label,
            "bbox": None
            if self.bbox is None
            else {
                "xmin": self.bbox.xmin,
                "ymin": self.bbox.ymin,
                "xmax": self.bbox.xmax,
                "ymax": self.bbox.ymax,
            },
            "auxFields": dict(self.aux_fields),
        }


@dataclass(frozen=True)
class QueryError:
    kind: Literal["transport", "server"]
    message: str
