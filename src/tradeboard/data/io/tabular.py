"""Delimited text parser for candidate and ranking exports.

The pipeline files are produced by an external job and are not always clean:
BOM from Excel, CRLF from Windows runners, a quoted field cut off by a
truncated upload. ``parse_table`` therefore never raises; it extracts
whatever rows it can. Callers decide whether zero rows is an error.
"""

from __future__ import annotations

from typing import Any, Collection, Iterable, Mapping, Sequence

from tradeboard.data.io.cells import parse_cell

BOM = "\ufeff"
DEFAULT_DELIMITER = ","
SNIFF_DELIMITERS = (",", ";", "\t")


def sniff_delimiter(text: str) -> str:
    """Pick the delimiter from the header line (most frequent wins, ',' on ties)."""
    header = text.lstrip(BOM).split("\n", 1)[0]
    best = DEFAULT_DELIMITER
    best_count = header.count(DEFAULT_DELIMITER)
    for d in SNIFF_DELIMITERS[1:]:
        n = header.count(d)
        if n > best_count:
            best, best_count = d, n
    return best


def split_records(text: str, delimiter: str = DEFAULT_DELIMITER) -> list[list[str]]:
    """Tokenize text into raw string fields per record (no typing, no trimming)."""
    if text.startswith(BOM):
        text = text[1:]

    records: list[list[str]] = []
    row: list[str] = []
    field: list[str] = []
    in_quotes = False
    i = 0
    n = len(text)

    while i < n:
        c = text[i]

        if in_quotes:
            if c == '"':
                if i + 1 < n and text[i + 1] == '"':
                    field.append('"')
                    i += 2
                    continue
                in_quotes = False
                i += 1
                continue
            if c == "\r" and i + 1 < n and text[i + 1] == "\n":
                i += 1
                continue
            field.append(c)
            i += 1
            continue

        if c == '"':
            in_quotes = True
        elif c == delimiter:
            row.append("".join(field))
            field = []
        elif c == "\n":
            row.append("".join(field))
            field = []
            records.append(row)
            row = []
        elif c == "\r":
            pass
        else:
            field.append(c)
        i += 1

    # last record; an unterminated quote simply ends here
    if field or row or in_quotes:
        row.append("".join(field))
        records.append(row)

    return records


def _is_empty(raw: list[str]) -> bool:
    return all(v.strip() == "" for v in raw)


def parse_table(
    text: str,
    delimiter: str | None = None,
    text_columns: Collection[str] = (),
) -> list[dict[str, Any]]:
    """Parse delimited text with a header line into typed row dicts.

    - cells of ``text_columns`` stay trimmed text ("005930" keeps its zeros)
    - header cells are trimmed; unnamed header cells are skipped as columns
    - rows shorter than the header get None for the missing cells
    - cells beyond the header width are dropped
    - rows where every cell is empty are dropped
    """
    if not text:
        return []
    delim = delimiter or sniff_delimiter(text)
    records = [r for r in split_records(text, delim) if not _is_empty(r)]
    if not records:
        return []

    header = [h.strip() for h in records[0]]
    columns = [(idx, name, name in text_columns) for idx, name in enumerate(header) if name]

    out: list[dict[str, Any]] = []
    for raw in records[1:]:
        row: dict[str, Any] = {}
        for idx, name, as_text in columns:
            if idx >= len(raw):
                row[name] = None
            elif as_text:
                row[name] = raw[idx].strip() or None
            else:
                row[name] = parse_cell(raw[idx]).value
        out.append(row)
    return out


def _quote(value: Any, delimiter: str) -> str:
    if value is None:
        return ""
    if isinstance(value, float):
        s = repr(value)
    else:
        s = str(value)
    if any(ch in s for ch in (delimiter, '"', "\n", "\r")) or s != s.strip():
        return '"' + s.replace('"', '""') + '"'
    return s


def format_table(
    rows: Iterable[Mapping[str, Any]],
    columns: Sequence[str],
    delimiter: str = DEFAULT_DELIMITER,
) -> str:
    """Write rows as delimited text that ``parse_table`` reads back."""
    lines = [delimiter.join(_quote(c, delimiter) for c in columns)]
    for r in rows:
        lines.append(delimiter.join(_quote(r.get(c), delimiter) for c in columns))
    return "\n".join(lines) + "\n"
