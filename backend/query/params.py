from __future__ import annotations

import json
from typing import Any

from geo.bounds import BBox, Envelope
from query.errors import ServerError
from query.types import ResultItem, SearchQuery
from settings.types import SearchServiceConfig

# Envelope alias -> server-side expression template.
ENVELOPE_COLUMNS: dict[str, str] = {
    "xmin": "STEnvelopeMinX([{geom}])",
    "xmax": "STEnvelopeMaxX([{geom}])",
    "ymin": "STEnvelopeMinY([{geom}])",
    "ymax": "STEnvelopeMaxY([{geom}])",
}


def quote_literal(text: str) -> str:
    return "'" + (text or "").replace("'", "''") + "'"


def build_columns(service: SearchServiceConfig) -> list[dict[str, str]]:
    cols: list[dict[str, str]] = [{"Value": service.idColumn}, {"Value": service.labelColumn}]
    cols += [{"Value": c, "Alias": c} for c in service.auxColumns]
    cols += [
        {"Value": expr.format(geom=service.geometryColumn), "Alias": alias}
        for alias, expr in ENVELOPE_COLUMNS.items()
    ]
    return cols


def build_predicate(text: str, service: SearchServiceConfig) -> str:
    lit = quote_literal(text)
    return f"([{service.idColumn}] contains {lit}) OR ([{service.labelColumn}] contains {lit})"


def build_query_params(
    query: SearchQuery,
    service: SearchServiceConfig,
    *,
    view_box: BBox | None = None,
) -> dict[str, str]:
    """
    Request parameters for the vector-layer search endpoint.

    Matches on either the id or the holder column, sorted by holder name.
    """
    params: dict[str, str] = {
        "layer": service.layerId,
        "out_cs": service.outCs,
        "WrapStyle": "None",
        "columns": json.dumps(build_columns(service), ensure_ascii=False),
        "orderby": service.labelColumn,
        "query": build_predicate(query.normalized_text(), service),
    }
    if query.page_size is not None:
        params["pagesize"] = str(int(query.page_size))
    if view_box is not None:
        params["border_cs"] = service.borderCs
        params["border"] = json.dumps(
            {"type": "Polygon", "coordinates": [list(map(list, view_box.polygon().exterior.coords))]}
        )
    return params


def field_map(service: SearchServiceConfig) -> dict[str, str]:
    out = {service.idColumn: "id", service.labelColumn: "label"}
    out.update({c: f"aux:{c}" for c in service.auxColumns})
    out.update({alias: alias for alias in ENVELOPE_COLUMNS})
    return out


def _text(v: Any) -> str:
    return "" if v is None else str(v)


def row_to_item(fields: list[str], row: list[Any], fmap: dict[str, str]) -> ResultItem:
    attrs: dict[str, Any] = {}
    for name, value in zip(fields, row):
        key = fmap.get(name)
        if key is not None:
            attrs[key] = value
    aux = {
        k.split(":", 1)[1]: _text(v)
        for k, v in attrs.items()
        if k.startswith("aux:") and v is not None
    }
    return ResultItem(
        id=_text(attrs.get("id")),
        label=_text(attrs.get("label")),
        bbox=Envelope.from_row(attrs),
        aux_fields=aux,
    )


def parse_response(resp: dict[str, Any], service: SearchServiceConfig) -> list[ResultItem]:
    """
    Zip the reply's parallel `fields` / `values` arrays into result items.

    Raises ServerError for an explicit error reply or a reply without a result table.
    """
    status = (resp or {}).get("Status")
    if status == "error":
        info = resp.get("ErrorInfo") or {}
        raise ServerError(str(info.get("ErrorMessage") or "unknown server error"))
    result = (resp or {}).get("Result")
    if status != "ok" or not isinstance(result, dict):
        raise ServerError(f"Unexpected reply status: {status!r}")

    raw_fields = result.get("fields") or []
    values = result.get("values") or []
    if not isinstance(raw_fields, list) or not isinstance(values, list):
        raise ServerError("Malformed result table: `fields` and `values` must be lists")
    for i, row in enumerate(values):
        if not isinstance(row, list) or len(row) != len(raw_fields):
            raise ServerError(f"Malformed result row {i}: expected {len(raw_fields)} values, got {row!r}")

    fields = [str(f) for f in raw_fields]
    fmap = field_map(service)
    return [row_to_item(fields, row, fmap) for row in values]
