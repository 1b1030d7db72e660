"""JSON encoding of property values for file-backed stores.

Plain JSON covers strings, numbers, booleans, null and lists of those.
Temporal and spatial values read from a Neo4j store (``neo4j.time``,
``neo4j.spatial``) and stdlib ``datetime`` values are written as tagged
objects and restored to the same type on load.  ``Duration`` and
``Point`` are tuple subclasses, so they must be tagged before
``json.dumps`` sees them.
"""

from __future__ import annotations

from datetime import date
from datetime import datetime
from datetime import time
from typing import Any

from neo4j.spatial import CartesianPoint
from neo4j.spatial import Point
from neo4j.spatial import WGS84Point
from neo4j.time import Date as Neo4jDate
from neo4j.time import DateTime as Neo4jDateTime
from neo4j.time import Duration
from neo4j.time import Time as Neo4jTime

from graphsync.errors import PropertyValueError

TYPE_TAG = "$type"

_NEO4J_TEMPORALS: dict[str, type] = {
    "neo4j.datetime": Neo4jDateTime,
    "neo4j.date": Neo4jDate,
    "neo4j.time": Neo4jTime,
}
_NATIVE_TEMPORALS: dict[str, type] = {
    "datetime": datetime,
    "date": date,
    "time": time,
}
_POINT_TYPES: dict[int, type[Point]] = {
    7203: CartesianPoint,
    9157: CartesianPoint,
    4326: WGS84Point,
    4979: WGS84Point,
}
_SCALARS = (str, int, float, bool, type(None))


def encode_value(value: Any) -> Any:
    """Return a JSON-ready form of one property value.

    Raises ``PropertyValueError`` for values no store could hold.
    """
    if isinstance(value, Duration):
        return {
            TYPE_TAG: "neo4j.duration",
            "months": value.months,
            "days": value.days,
            "seconds": value.seconds,
            "nanoseconds": value.nanoseconds,
        }
    if isinstance(value, Point):
        return {TYPE_TAG: "point", "srid": value.srid, "coordinates": list(value)}
    for tag, cls in _NEO4J_TEMPORALS.items():
        if isinstance(value, cls):
            return {TYPE_TAG: tag, "value": value.iso_format()}
    # datetime before date: datetime is a date subclass
    for tag, cls in _NATIVE_TEMPORALS.items():
        if isinstance(value, cls):
            return {TYPE_TAG: tag, "value": value.isoformat()}
    if isinstance(value, (list, tuple)):
        return [encode_value(v) for v in value]
    if isinstance(value, _SCALARS):
        return value
    msg = f"Unsupported property value of type {type(value).__name__}: {value!r}"
    raise PropertyValueError(msg)


def decode_value(value: Any) -> Any:
    """Inverse of ``encode_value``."""
    if isinstance(value, list):
        return [decode_value(v) for v in value]
    if not isinstance(value, dict) or TYPE_TAG not in value:
        return value
    tag = value[TYPE_TAG]
    if tag == "neo4j.duration":
        return Duration(
            months=value["months"],
            days=value["days"],
            seconds=value["seconds"],
            nanoseconds=value["nanoseconds"],
        )
    if tag == "point":
        point_type = _POINT_TYPES.get(value["srid"])
        if point_type is None:
            msg = f"Unknown point srid {value['srid']!r}"
            raise PropertyValueError(msg)
        return point_type(value["coordinates"])
    if tag in _NEO4J_TEMPORALS:
        return _NEO4J_TEMPORALS[tag].from_iso_format(value["value"])
    if tag in _NATIVE_TEMPORALS:
        return _NATIVE_TEMPORALS[tag].fromisoformat(value["value"])
    msg = f"Unknown property value tag {tag!r}"
    raise PropertyValueError(msg)


def encode_properties(properties: dict[str, Any]) -> dict[str, Any]:
    return {key: encode_value(value) for key, value in properties.items()}


def decode_properties(properties: dict[str, Any]) -> dict[str, Any]:
    return {key: decode_value(value) for key, value in properties.items()}
