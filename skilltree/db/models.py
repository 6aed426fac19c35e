"""Dataclass models representing DB rows.

These are plain Python objects – not ORM models.  The DB layer serialises /
deserialises to and from these types; encoded column text never appears here.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

# Suggestions offered by the forms.  Any string is accepted.
SUGGESTED_CATEGORIES = ("digital", "physical", "circuit")
SUGGESTED_EDGE_KINDS = ("improves", "reverts", "forks")

MEDIA_TYPES = ("img", "video")


@dataclass
class MediaItem:
    type: str
    src: str
    alt: Optional[str] = None

    def to_dict(self) -> dict[str, str]:
        data = {"type": self.type, "src": self.src}
        if self.alt is not None:
            data["alt"] = self.alt
        return data


@dataclass
class Node:
    id: str
    project_id: str
    title: str
    date_iso: str
    categories: list[str] = field(default_factory=list)
    summary: Optional[str] = None
    media: Optional[list[MediaItem]] = None
    metrics: Optional[dict[str, float]] = None
    content_md: Optional[str] = None
    content_format: Optional[str] = None
    show_both: bool = False
    created_at: int = 0
    updated_at: int = 0

    @property
    def has_markdown(self) -> bool:
        return bool(self.content_md and self.content_md.strip())


@dataclass
class Edge:
    id: str
    project_id: str
    from_id: str
    to_id: str
    kind: Optional[str] = None
    created_at: int = 0


@dataclass
class ProjectSummary:
    id: str
    slug: str
    title: str
    summary: Optional[str]
    created_at: int
    updated_at: int


@dataclass
class Project:
    """A project together with all of its nodes and edges."""

    id: str
    slug: str
    title: str
    summary: Optional[str]
    created_at: int
    updated_at: int
    nodes: list[Node] = field(default_factory=list)
    edges: list[Edge] = field(default_factory=list)

    def find_node(self, node_id: Optional[str]) -> Optional[Node]:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None
