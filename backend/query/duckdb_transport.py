from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Any, Iterable

import duckdb

logger = logging.getLogger(__name__)

_TERM_RE = re.compile(
    r"^\(\s*\[(?P<col>[^\]]+)\]\s+contains\s+'(?P<text>(?:[^']|'')*)'\s*\)$",
    re.IGNORECASE,
)
_JOIN_RE = re.compile(r"\s+(OR|AND)\s+(?=\()", re.IGNORECASE)
_ENVELOPE_RE = re.compile(r"^STEnvelope(?P<edge>Min|Max)(?P<axis>X|Y)\(\[[^\]]+\]\)$", re.IGNORECASE)
_ORDER_RE = re.compile(r"^\[?(?P<col>[^\]\s]+)\]?(?:\s+(?P<dir>ASC|DESC))?$", re.IGNORECASE)


def _ident(name: str) -> str:
    return '"' + name.replace('"', '""') + '"'


def _like_pattern(text: str) -> str:
    escaped = text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class DuckDBQueryTransport:
    """
    Answers layer-search requests from a local DuckDB table.

    Understands the subset of the service's request contract the search control
    sends: `[col] contains 'text'` terms joined by OR/AND, column aliases,
    envelope columns (stored as plain xmin/ymin/xmax/ymax), `orderby`,
    `pagesize` and `page`. Failures come back as `Status: "error"` replies,
    the way the real endpoint reports them.
    """

    def __init__(self, conn: duckdb.DuckDBPyConnection, *, layer_id: str, table: str = "features"):
        self.conn = conn
        self.layer_id = layer_id
        self.table = table
        self._columns = [
            str(r[0]) for r in conn.execute(f"DESCRIBE {_ident(table)}").fetchall()
        ]

    @classmethod
    def from_csv(cls, path: Path, *, layer_id: str) -> "DuckDBQueryTransport":
        conn = duckdb.connect(database=":memory:")
        literal = "'" + str(path).replace("'", "''") + "'"
        conn.execute(f"CREATE TABLE features AS SELECT * FROM read_csv_auto({literal})")
        return cls(conn, layer_id=layer_id)

    @classmethod
    def from_rows(cls, rows: Iterable[dict[str, Any]], *, layer_id: str) -> "DuckDBQueryTransport":
        rows = list(rows)
        if not rows:
            raise ValueError("At least one row is required to infer the feature table schema")
        names = list(rows[0].keys())

        def sql_type(name: str) -> str:
            sample = next((r.get(name) for r in rows if r.get(name) is not None), None)
            return "DOUBLE" if isinstance(sample, (int, float)) else "VARCHAR"

        conn = duckdb.connect(database=":memory:")
        conn.execute(
            "CREATE TABLE features ("
            + ", ".join(f"{_ident(n)} {sql_type(n)}" for n in names)
            + ")"
        )
        conn.executemany(
            "INSERT INTO features VALUES (" + ", ".join("?" for _ in names) + ")",
            [[r.get(n) for n in names] for r in rows],
        )
        return cls(conn, layer_id=layer_id)

    async def send(self, endpoint: str, params: dict[str, str]) -> dict[str, Any]:
        try:
            fields, values = self._execute(params)
        except (ValueError, duckdb.Error) as e:
            logger.info("local layer search rejected request: %s", e)
            return {"Status": "error", "ErrorInfo": {"ErrorMessage": str(e)}}
        return {"Status": "ok", "Result": {"fields": fields, "values": values}}

    async def aclose(self) -> None:
        self.conn.close()

    def _execute(self, params: dict[str, str]) -> tuple[list[str], list[list[Any]]]:
        layer = params.get("layer")
        if layer != self.layer_id:
            raise ValueError(f"Layer not found: {layer}")

        select, fields = self._select(params.get("columns"))
        where, args = self._where(params.get("query") or "")
        sql = f"SELECT {select} FROM {_ident(self.table)}"
        if where:
            sql += f" WHERE {where}"
        if params.get("orderby"):
            sql += f" ORDER BY {self._order(params['orderby'])}"
        if params.get("pagesize"):
            size = int(params["pagesize"])
            page = int(params.get("page") or 0)
            sql += " LIMIT ? OFFSET ?"
            args += [size, size * page]

        rows = self.conn.execute(sql, args).fetchall()
        return fields, [list(r) for r in rows]

    def _column(self, name: str) -> str:
        if name not in self._columns:
            raise ValueError(f"Unknown column: {name}")
        return _ident(name)

    def _select(self, raw: str | None) -> tuple[str, list[str]]:
        if not raw:
            return ", ".join(_ident(c) for c in self._columns), list(self._columns)
        cols = json.loads(raw)
        if not isinstance(cols, list) or not cols:
            raise ValueError("`columns` must be a non-empty JSON list")

        exprs: list[str] = []
        fields: list[str] = []
        for c in cols:
            value = str(c.get("Value") or "")
            alias = str(c.get("Alias") or value)
            env = _ENVELOPE_RE.match(value)
            source = (env.group("axis") + env.group("edge")).lower() if env else value
            exprs.append(f"{self._column(source)} AS {_ident(alias)}")
            fields.append(alias)
        return ", ".join(exprs), fields

    def _where(self, query: str) -> tuple[str, list[Any]]:
        query = query.strip()
        if not query:
            return "", []
        parts = _JOIN_RE.split(query)
        sql: list[str] = []
        args: list[Any] = []
        for i, part in enumerate(parts):
            if i % 2 == 1:
                sql.append(part.upper())
                continue
            m = _TERM_RE.match(part.strip())
            if m is None:
                raise ValueError(f"Unsupported query term: {part.strip()}")
            text = m.group("text").replace("''", "'")
            sql.append(f"CAST({self._column(m.group('col'))} AS VARCHAR) ILIKE ? ESCAPE '\\'")
            args.append(_like_pattern(text))
        return " ".join(sql), args

    def _order(self, raw: str) -> str:
        m = _ORDER_RE.match(raw.strip())
        if m is None:
            raise ValueError(f"Unsupported orderby: {raw}")
        return f"{self._column(m.group('col'))} {(m.group('dir') or 'ASC').upper()}"
