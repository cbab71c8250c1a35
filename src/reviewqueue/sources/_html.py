"""Table-row extraction for the scraped status pages, plus the shared page fetch."""

from __future__ import annotations

import logging
from html.parser import HTMLParser

import httpx

from reviewqueue.contracts.exceptions import SourceError, SourceParseError

_LOG = logging.getLogger(__name__)


class _TableRowParser(HTMLParser):
    """Collects the cell texts of every body row of one target table.

    Rows inside ``<thead>`` are excluded. Rows that sit directly under the
    table count as body rows, the way a browser inserts an implicit
    ``<tbody>``. Tables nested inside the target are flattened into the
    enclosing cell's text.
    """

    def __init__(self, *, table_id: str | None, table_class: str | None) -> None:
        super().__init__(convert_charrefs=True)
        self._table_id = table_id
        self._table_class = table_class
        self._depth = 0
        self._in_thead = False
        self._row: list[str] | None = None
        self._cell: list[str] | None = None
        self.found = False
        self.rows: list[list[str]] = []

    def _matches(self, attributes: dict[str, str | None]) -> bool:
        if self._table_id is not None and attributes.get("id") != self._table_id:
            return False
        if self._table_class is not None:
            classes = (attributes.get("class") or "").split()
            if self._table_class not in classes:
                return False
        return True

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        if tag == "table":
            if self._depth:
                self._depth += 1
            elif not self.found and self._matches(dict(attrs)):
                self._depth = 1
                self.found = True
            return
        if self._depth != 1:
            return

        if tag == "thead":
            self._finish_row()
            self._in_thead = True
        elif tag == "tbody":
            self._finish_row()
            self._in_thead = False
        elif tag == "tr":
            self._finish_row()
            if not self._in_thead:
                self._row = []
        elif tag in {"td", "th"} and self._row is not None:
            self._finish_cell()
            self._cell = []

    def handle_endtag(self, tag: str) -> None:
        if tag == "table" and self._depth:
            self._depth -= 1
            if self._depth == 0:
                self._finish_row()
            return
        if self._depth != 1:
            return

        if tag in {"td", "th"}:
            self._finish_cell()
        elif tag in {"tr", "tbody"}:
            self._finish_row()
        elif tag == "thead":
            self._in_thead = False

    def handle_data(self, data: str) -> None:
        if self._cell is not None:
            self._cell.append(data)

    def _finish_cell(self) -> None:
        if self._cell is not None and self._row is not None:
            self._row.append("".join(self._cell).strip())
        self._cell = None

    def _finish_row(self) -> None:
        self._finish_cell()
        if self._row is not None:
            self.rows.append(self._row)
        self._row = None


def table_rows(
    html: str,
    *,
    source: str,
    table_id: str | None = None,
    table_class: str | None = None,
) -> list[list[str]]:
    """Return the trimmed cell texts of each body row of the first matching table.

    Raises:
        SourceParseError: If the page has no matching table at all.
    """
    parser = _TableRowParser(table_id=table_id, table_class=table_class)
    parser.feed(html)
    parser.close()
    if not parser.found:
        selector = f"#{table_id}" if table_id else f"table.{table_class}"
        raise SourceParseError(f"{source} page has no {selector} table", source=source)
    return parser.rows


async def fetch_text(http: httpx.AsyncClient, url: str, *, source: str) -> str:
    """GET a page body, mapping transport and status failures to ``SourceError``."""
    _LOG.debug("Requesting %s page %s", source, url)
    try:
        response = await http.get(url)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise SourceError(f"{source} returned HTTP {exc.response.status_code}", source=source) from exc
    except httpx.HTTPError as exc:
        raise SourceError(f"{source} request failed: {exc}", source=source) from exc
    return response.text
