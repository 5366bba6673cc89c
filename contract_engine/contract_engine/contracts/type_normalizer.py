"""Canonical type vocabulary shared by contracts and store introspection.

Contract-side types are pydantic field annotations; they are classified
recursively (``Optional``/``Annotated`` wrappers are unwrapped) into one of
the :class:`~contract_engine.models.columns.TypeToken` members.

Authoritative-side types are raw strings reported by the store (or written
in a DDL manifest).  They are only lower-cased and aliased, never
re-classified: comparison against a contract token goes through
:func:`equivalent`, which is intentionally directional.

Classification table (contract side)
-------------------------------------
* ``str`` → ``text``; ``str`` with ``json_schema_extra={"format": "uuid"}``
  → ``uuid``; with ``"date-time"`` → ``timestamp_tz``.
* ``uuid.UUID`` → ``uuid``.
* ``int`` → ``integer``; ``float`` / ``Decimal`` → ``numeric``.
* ``bool`` → ``boolean``; ``datetime`` / ``date`` → ``timestamp_tz``.
* nested models, ``dict``, ``Mapping``, ``TypedDict``, ``Any`` → ``jsonb``.
* ``list`` / ``tuple`` / ``set`` / ``Sequence`` → ``array``.
* ``Enum`` subclasses and ``Literal`` → ``enum_like``.
* anything else → ``unknown`` (always treated as compatible).
"""

from __future__ import annotations

import collections.abc
import datetime as dt
import decimal
import enum
import types
import uuid
from collections.abc import Iterable
from typing import Annotated, Any, Literal, Union, get_args, get_origin, is_typeddict

from pydantic import (
    AnyUrl,
    AwareDatetime,
    BaseModel,
    EmailStr,
    FutureDate,
    FutureDatetime,
    NaiveDatetime,
    PastDate,
    PastDatetime,
)
from pydantic.fields import FieldInfo

from contract_engine.models.columns import TypeToken

_ARRAY_ORIGINS: frozenset[Any] = frozenset(
    {
        list,
        tuple,
        set,
        frozenset,
        collections.abc.Sequence,
        collections.abc.MutableSequence,
        collections.abc.Set,
        collections.abc.MutableSet,
        collections.abc.Iterable,
    }
)
_OBJECT_ORIGINS: frozenset[Any] = frozenset({dict, collections.abc.Mapping, collections.abc.MutableMapping})

# pydantic's constrained date/time types are plain marker classes at runtime,
# not datetime subclasses.
_PYDANTIC_TEMPORAL: tuple[type, ...] = (
    AwareDatetime,
    NaiveDatetime,
    PastDatetime,
    FutureDatetime,
    PastDate,
    FutureDate,
)
_PYDANTIC_TEXT: tuple[type, ...] = (EmailStr, AnyUrl)

_STRING_FORMATS: dict[str, TypeToken] = {
    "uuid": TypeToken.UUID,
    "date-time": TypeToken.TIMESTAMP_TZ,
}

# Store spellings that name a canonical token.  ``timestamp with time zone``
# and ``USER-DEFINED`` are what PostgreSQL's information schema reports for
# ``timestamptz`` and enum columns respectively.
_AUTHORITATIVE_ALIASES: dict[str, str] = {
    "timestamptz": TypeToken.TIMESTAMP_TZ.value,
    "timestamp with time zone": TypeToken.TIMESTAMP_TZ.value,
    "user-defined": TypeToken.ENUM_LIKE.value,
}


# ---------------------------------------------------------------------------
# Contract side
# ---------------------------------------------------------------------------


def classify_field(field: FieldInfo) -> TypeToken:
    """Classify a pydantic model field into a canonical token.

    pydantic strips the outermost ``Annotated`` layer into
    ``field.metadata``, so that metadata (and the field itself, which may
    carry ``json_schema_extra``) is passed along as refinements.
    """
    return classify_annotation(field.annotation, (field, *field.metadata))


def classify_annotation(annotation: Any, metadata: Iterable[Any] = ()) -> TypeToken:
    """Classify a type annotation into a canonical token.

    Parameters
    ----------
    annotation:
        Any Python type annotation: a class, a generic alias, a union, an
        ``Annotated`` form, or ``Any``.
    metadata:
        Refinements collected from enclosing ``Annotated`` wrappers.

    Returns
    -------
    TypeToken
        The canonical token; ``UNKNOWN`` when nothing matches.
    """
    metadata = tuple(metadata)

    if annotation is Any:
        return TypeToken.JSONB

    origin = get_origin(annotation)

    if origin is Annotated:
        inner, *extra = get_args(annotation)
        return classify_annotation(inner, (*metadata, *extra))

    if origin is Union or origin is types.UnionType:
        members = [arg for arg in get_args(annotation) if arg is not type(None)]
        if len(members) == 1:
            return classify_annotation(members[0], metadata)
        return TypeToken.UNKNOWN

    if origin is Literal:
        return TypeToken.ENUM_LIKE

    if origin is not None:
        if origin in _ARRAY_ORIGINS:
            return TypeToken.ARRAY
        if origin in _OBJECT_ORIGINS:
            return TypeToken.JSONB
        return TypeToken.UNKNOWN

    if not isinstance(annotation, type):
        return TypeToken.UNKNOWN

    return _classify_class(annotation, metadata)


def _classify_class(cls: type, metadata: tuple[Any, ...]) -> TypeToken:
    # Order matters: str-mixin enums are str, bool is int, datetime is date.
    if issubclass(cls, enum.Enum):
        return TypeToken.ENUM_LIKE
    if issubclass(cls, bool):
        return TypeToken.BOOLEAN
    if issubclass(cls, int):
        return TypeToken.INTEGER
    if issubclass(cls, (float, decimal.Decimal)):
        return TypeToken.NUMERIC
    if issubclass(cls, uuid.UUID):
        return TypeToken.UUID
    if issubclass(cls, (dt.datetime, dt.date)) or issubclass(cls, _PYDANTIC_TEMPORAL):
        return TypeToken.TIMESTAMP_TZ
    if issubclass(cls, str):
        return _classify_string(metadata)
    if issubclass(cls, _PYDANTIC_TEXT):
        return TypeToken.TEXT
    if issubclass(cls, (bytes, bytearray)):
        return TypeToken.UNKNOWN
    if issubclass(cls, (BaseModel, collections.abc.Mapping)) or is_typeddict(cls):
        return TypeToken.JSONB
    if issubclass(cls, (collections.abc.Sequence, collections.abc.Set)):
        return TypeToken.ARRAY
    return TypeToken.UNKNOWN


def _classify_string(metadata: tuple[Any, ...]) -> TypeToken:
    for item in metadata:
        extra = getattr(item, "json_schema_extra", None) if isinstance(item, FieldInfo) else None
        if isinstance(extra, dict):
            token = _STRING_FORMATS.get(str(extra.get("format", "")))
            if token is not None:
                return token
    return TypeToken.TEXT


# ---------------------------------------------------------------------------
# Authoritative side
# ---------------------------------------------------------------------------


def normalize_authoritative(raw_type: str) -> str:
    """Normalize a raw store/DDL type string for comparison.

    The string is stripped and lower-cased; known aliases of canonical
    tokens are rewritten; everything else is returned verbatim so that
    parameterized types such as ``character varying(255)`` survive.
    """
    lowered = raw_type.strip().lower()
    return _AUTHORITATIVE_ALIASES.get(lowered, lowered)


# ---------------------------------------------------------------------------
# Equivalence
# ---------------------------------------------------------------------------


def equivalent(expected: str, actual: str) -> bool:
    """Return True when *actual* satisfies the *expected* contract type.

    Directional: ``equivalent("integer", "bigint")`` holds, the reverse is
    never evaluated.  The prefix rule tolerates parameterized store types
    and also lets ``text`` match ``text[]``.
    """
    if expected == TypeToken.UNKNOWN:
        return True
    if expected == TypeToken.ENUM_LIKE and actual.startswith("text"):
        return True
    if expected == TypeToken.INTEGER and actual.startswith("bigint"):
        return True
    return actual.startswith(expected)
