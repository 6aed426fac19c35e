"""Parsing of the ``intent`` form posts sent by the editor and viewer pages.

Field names follow the browser forms (``dateISO``, ``mediaJson`` ...); the
parsed values use the DB layer's keyword names.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Callable, Mapping, Optional

from skilltree.db.codec import parse_media, parse_metrics
from skilltree.errors import ValidationError

logger = logging.getLogger(__name__)

CREATE_NODE = "createNode"
UPDATE_NODE = "updateNode"
DELETE_NODE = "deleteNode"
CREATE_EDGE = "createEdge"
DELETE_EDGE = "deleteEdge"

INTENTS = (CREATE_NODE, UPDATE_NODE, DELETE_NODE, CREATE_EDGE, DELETE_EDGE)

_TRUE = {"1", "true", "on", "yes"}

_INVALID = object()


def require_intent(form: Mapping[str, Any]) -> str:
    intent = str(form.get("intent") or "")
    if intent not in INTENTS:
        raise ValidationError("Unknown intent")
    return intent


def require_field(form: Mapping[str, Any], name: str, message: str) -> str:
    value = str(form.get(name) or "").strip()
    if not value:
        raise ValidationError(message)
    return value


def parse_categories(raw: Optional[str]) -> list[str]:
    """``"digital, physical,"`` → ``["digital", "physical"]``."""
    return [c.strip() for c in (raw or "").split(",") if c.strip()]


def parse_flag(raw: Any) -> bool:
    return str(raw or "").strip().lower() in _TRUE


def _parse_json(raw: Optional[str], parser: Callable[[Any], Any], label: str) -> Any:
    """Decode a JSON form field; invalid input is logged and reported as ``_INVALID``."""
    if raw is None or not str(raw).strip():
        return None
    try:
        return parser(json.loads(raw))
    except (ValueError, TypeError, KeyError) as exc:
        logger.warning("Ignoring invalid %s form field: %s", label, exc)
        return _INVALID


def node_fields(form: Mapping[str, Any], partial: bool = False) -> dict[str, Any]:
    """Map node form fields to ``create_node`` / ``update_node`` keywords.

    With ``partial=True`` only fields present in the form are returned, which
    gives ``update_node`` its patch semantics.
    """
    fields: dict[str, Any] = {}

    def present(name: str) -> bool:
        return not partial or name in form

    if present("title"):
        fields["title"] = str(form.get("title") or "")
    if present("dateISO"):
        fields["date_iso"] = str(form.get("dateISO") or "")
    if present("summary"):
        fields["summary"] = str(form.get("summary") or "").strip() or None
    if present("categories"):
        fields["categories"] = parse_categories(form.get("categories"))

    if present("mediaJson"):
        media = _parse_json(form.get("mediaJson"), parse_media, "mediaJson")
        if media is not _INVALID:
            fields["media"] = media or None
    if present("metricsJson"):
        metrics = _parse_json(form.get("metricsJson"), parse_metrics, "metricsJson")
        if metrics is not _INVALID:
            fields["metrics"] = metrics or None

    if present("contentMd"):
        content_md = str(form.get("contentMd") or "")
        fields["content_md"] = content_md if content_md.strip() else None
        if "contentFormat" not in form:
            fields["content_format"] = "md" if content_md.strip() else None
    if "contentFormat" in form:
        fields["content_format"] = str(form.get("contentFormat") or "").strip() or None
    if present("showBoth"):
        fields["show_both"] = parse_flag(form.get("showBoth"))

    return fields
