"""Encode / decode boundary for the JSON text columns of ``nodes``.

``categories``, ``media`` and ``metrics`` hold variable-shape values in plain
TEXT columns.  Each column has one :class:`JsonColumn` that turns Python values
into stored text and back.  Decoding never raises: a corrupt or wrongly shaped
value is logged and replaced by the column's empty value so the rest of the
row stays readable.
"""

from __future__ import annotations

import json
import logging
import math
from typing import Any, Callable, Generic, Optional, TypeVar

from skilltree.db.models import MEDIA_TYPES, MediaItem
from skilltree.errors import ValidationError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class JsonColumn(Generic[T]):
    """Typed JSON serializer for one column.

    Args:
        name: Column name, used in log messages.
        parse: Converts the decoded JSON value into the Python value.  Raises
            ``ValueError`` / ``TypeError`` when the shape is wrong.
        dump: Converts the Python value into something ``json.dumps`` accepts.
        empty: Factory for the value returned on NULL or undecodable text.
        store_empty_as_null: Write ``NULL`` instead of JSON for falsy values.
    """

    def __init__(
        self,
        name: str,
        parse: Callable[[Any], T],
        dump: Callable[[T], Any],
        empty: Callable[[], Any],
        store_empty_as_null: bool = True,
    ) -> None:
        self.name = name
        self._parse = parse
        self._dump = dump
        self._empty = empty
        self._store_empty_as_null = store_empty_as_null

    def encode(self, value: Optional[T]) -> Optional[str]:
        """Serialise *value* for storage.

        The value is checked with the same shape rules ``decode`` applies, so
        nothing is written that would read back empty.

        Raises:
            ValidationError: the value has the wrong shape or holds a
                non-finite number.
        """
        if not value:
            if self._store_empty_as_null:
                return None
            value = self._empty()
        try:
            dumped = self._dump(value)
            self._parse(dumped)
            return json.dumps(dumped, allow_nan=False)
        except (ValueError, TypeError, KeyError, AttributeError) as exc:
            raise ValidationError(f"Invalid {self.name}: {exc}") from exc

    def decode(self, raw: Optional[str], row_id: str = "?") -> Any:
        if raw is None or raw == "":
            return self._empty()
        try:
            return self._parse(json.loads(raw))
        except (ValueError, TypeError, KeyError) as exc:
            logger.warning(
                "Could not decode %s of node %s, using empty value: %s",
                self.name, row_id, exc,
            )
            return self._empty()


# ---------------------------------------------------------------------------
# Shape checks
# ---------------------------------------------------------------------------

def _parse_categories(value: Any) -> list[str]:
    if not isinstance(value, list):
        raise TypeError(f"expected a list, got {type(value).__name__}")
    return [str(v) for v in value]


def _parse_media_item(value: Any) -> MediaItem:
    if not isinstance(value, dict):
        raise TypeError(f"expected an object, got {type(value).__name__}")
    media_type = value["type"]
    if media_type not in MEDIA_TYPES:
        raise ValueError(f"unknown media type {media_type!r}")
    alt = value.get("alt")
    return MediaItem(type=media_type, src=str(value["src"]), alt=None if alt is None else str(alt))


def _parse_media(value: Any) -> list[MediaItem]:
    if not isinstance(value, list):
        raise TypeError(f"expected a list, got {type(value).__name__}")
    return [_parse_media_item(v) for v in value]


def _dump_media(items: list[MediaItem]) -> list[Any]:
    # Plain dicts pass through and are shape-checked like stored JSON.
    return [item.to_dict() if isinstance(item, MediaItem) else item for item in items]


def _parse_metrics(value: Any) -> dict[str, float]:
    if not isinstance(value, dict):
        raise TypeError(f"expected an object, got {type(value).__name__}")
    metrics: dict[str, float] = {}
    for key, number in value.items():
        if isinstance(number, bool) or not isinstance(number, (int, float)):
            raise TypeError(f"metric {key!r} is not a number")
        if not math.isfinite(number):
            raise ValueError(f"metric {key!r} is not finite")
        metrics[str(key)] = number
    return metrics


# ---------------------------------------------------------------------------
# Column instances
# ---------------------------------------------------------------------------

CATEGORIES = JsonColumn[list[str]](
    "categories", _parse_categories, list, list, store_empty_as_null=False
)
MEDIA = JsonColumn[list[MediaItem]]("media", _parse_media, _dump_media, lambda: None)
METRICS = JsonColumn[dict[str, float]]("metrics", _parse_metrics, dict, lambda: None)


def parse_media(value: Any) -> list[MediaItem]:
    """Validate already-decoded media JSON (e.g. from a form field)."""
    return _parse_media(value)


def parse_metrics(value: Any) -> dict[str, float]:
    """Validate already-decoded metrics JSON (e.g. from a form field)."""
    return _parse_metrics(value)
