"""Column extraction from hand-written ``CREATE TABLE`` statements.

Manifests are Markdown documents holding a table's DDL inside a fenced
```` ```sql ```` block.  The parser handles the well-known subset of DDL
those manifests use, usually one column definition per line::

    CREATE TABLE public.profiles (
        id uuid PRIMARY KEY,
        email text NOT NULL,
        created_at timestamptz DEFAULT now(),
        CONSTRAINT profiles_email_key UNIQUE (email)
    );

Algorithm:

1. Take the parenthesized body (first ``(`` to last ``)``).
2. Split it into lines, then each line into definitions at commas outside
   parentheses; trim each and strip one trailing comma.
3. Skip blank lines and table-level ``CONSTRAINT`` / ``PRIMARY KEY`` lines.
4. The first token is the column name, the second (lower-cased) the type.
5. ``timestamptz`` becomes ``timestamp_tz``.
6. Rows named ``CREATE`` or ``TABLE`` are discarded; they only appear when
   the body was located across a statement boundary.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum

from contract_engine.contracts.type_normalizer import normalize_authoritative
from contract_engine.errors import ParseError

logger = logging.getLogger(__name__)

_SQL_BLOCK_RE = re.compile(r"```sql\s*(.*?)\s*```", re.DOTALL)
_PRIMARY_KEY_RE = re.compile(r"PRIMARY\s+KEY\b")
_CREATE_TABLE_RE = re.compile(
    r"CREATE\s+TABLE\s+(?:IF\s+NOT\s+EXISTS\s+)?([\w.\"]+)",
    re.IGNORECASE,
)
_KEYWORD_NAMES: frozenset[str] = frozenset({"CREATE", "TABLE"})


@dataclass(frozen=True)
class DdlColumn:
    """A ``{name, type}`` pair extracted from a column definition line."""

    name: str
    type: str


class LineKind(str, Enum):
    """Classification of one line of a ``CREATE TABLE`` body."""

    BLANK = "BLANK"
    CONSTRAINT = "CONSTRAINT"
    INCOMPLETE = "INCOMPLETE"
    KEYWORD = "KEYWORD"
    COLUMN = "COLUMN"


def extract_sql_block(text: str) -> str:
    """Return the content of the first ```` ```sql ```` fenced block in *text*.

    An empty block yields an empty string.

    Raises
    ------
    ParseError
        If *text* has no SQL block at all.
    """
    match = _SQL_BLOCK_RE.search(text)
    if match is None:
        raise ParseError("No ```sql fenced block found in manifest.")
    return match.group(1)


def table_name_from_ddl(ddl: str) -> str | None:
    """Return the unqualified table name of the first ``CREATE TABLE``, if any."""
    match = _CREATE_TABLE_RE.search(ddl)
    if match is None:
        return None
    qualified = match.group(1).replace('"', "")
    return qualified.rsplit(".", 1)[-1] or None


def clean_line(raw: str) -> str:
    """Trim *raw* and strip a single trailing comma."""
    line = raw.strip()
    if line.endswith(","):
        line = line[:-1]
    return line


def classify_line(line: str) -> LineKind:
    """Classify a cleaned body line.

    Only :attr:`LineKind.COLUMN` lines produce a column.
    """
    if not line:
        return LineKind.BLANK
    parts = line.split()
    upper = line.upper()
    if parts[0].upper() == "CONSTRAINT" or _PRIMARY_KEY_RE.match(upper):
        return LineKind.CONSTRAINT
    if len(parts) < 2:
        return LineKind.INCOMPLETE
    if parts[0].upper() in _KEYWORD_NAMES:
        return LineKind.KEYWORD
    return LineKind.COLUMN


def tokenize_column(line: str) -> DdlColumn:
    """Split a :attr:`LineKind.COLUMN` line into its name and normalized type."""
    name, raw_type = line.split()[:2]
    return DdlColumn(name=name, type=normalize_authoritative(raw_type))


def split_definitions(line: str) -> list[str]:
    """Split a body line at commas outside parentheses and string literals.

    ``numeric(10, 2)`` and ``DEFAULT 'a,b'`` stay inside their definition;
    a trailing comma leaves an empty last piece.
    """
    pieces: list[str] = []
    depth = 0
    quoted = False
    start = 0
    for index, char in enumerate(line):
        if char == "'":
            quoted = not quoted
        elif quoted:
            continue
        elif char == "(":
            depth += 1
        elif char == ")":
            depth = max(depth - 1, 0)
        elif char == "," and depth == 0:
            pieces.append(line[start:index])
            start = index + 1
    pieces.append(line[start:])
    return pieces


def _table_body(ddl: str) -> str | None:
    start = ddl.find("(")
    end = ddl.rfind(")")
    if start == -1 or end <= start + 1:
        return None
    return ddl[start + 1 : end]


def parse_create_table(ddl: str) -> list[DdlColumn]:
    """Extract the column definitions of a ``CREATE TABLE`` statement.

    Returns an empty list (and logs a warning) when the statement has no
    parenthesized body.
    """
    body = _table_body(ddl)
    if body is None:
        logger.warning("No parenthesized column list found in CREATE TABLE statement.")
        return []

    columns: list[DdlColumn] = []
    for raw in body.split("\n"):
        for definition in split_definitions(raw):
            line = clean_line(definition)
            kind = classify_line(line)
            if kind == LineKind.COLUMN:
                columns.append(tokenize_column(line))
            elif kind == LineKind.KEYWORD:
                logger.debug("Discarding keyword row in DDL body: %r", line)
    return columns
