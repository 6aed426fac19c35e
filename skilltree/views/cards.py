"""HTML fragments for a single node: card, media thumbnail, detail panel.

The detail panel follows one rule:

* no markdown                    → structured card only (``"details"``)
* markdown, ``show_both`` off    → markdown only (``"markdown"``)
* markdown, ``show_both`` on     → tab selector, markdown tab first (``"tabs"``)
"""

from __future__ import annotations

from html import escape

import markdown as md
import nh3

from skilltree.db.models import MediaItem, Node

DETAILS = "details"
MARKDOWN = "markdown"
TABS = "tabs"

_MD_EXTENSIONS = ["extra", "sane_lists"]


def detail_view_mode(node: Node) -> str:
    if not node.has_markdown:
        return DETAILS
    return TABS if node.show_both else MARKDOWN


def render_markdown(source: str) -> str:
    """Markdown → sanitised HTML."""
    return nh3.clean(md.markdown(source or "", extensions=_MD_EXTENSIONS))


def render_media_thumb(media: MediaItem, css_class: str = "thumb") -> str:
    src = escape(media.src, quote=True)
    if media.type == "img":
        alt = escape(media.alt or "", quote=True)
        return f'<img class="{css_class}" src="{src}" alt="{alt}" loading="lazy">'
    if media.type == "video":
        return f'<video class="{css_class}" src="{src}" controls muted playsinline></video>'
    return ""


def _header(node: Node) -> str:
    return (
        '<div class="card-head">'
        f"<h3>{escape(node.title)}</h3>"
        f'<time datetime="{escape(node.date_iso, quote=True)}">{escape(node.date_iso)}</time>'
        "</div>"
    )


def _categories(node: Node) -> str:
    if not node.categories:
        return ""
    chips = "".join(f'<span class="chip">{escape(c)}</span>' for c in node.categories)
    return f'<div class="chips">{chips}</div>'


def render_node_card(node: Node) -> str:
    parts = [_header(node), _categories(node)]
    if node.summary:
        parts.append(f'<p class="summary">{escape(node.summary)}</p>')
    if node.media:
        parts.append(f'<div class="media">{render_media_thumb(node.media[0])}</div>')
    if node.metrics:
        metrics = "".join(
            f"<span>{escape(name)}: {value:g}</span>" for name, value in node.metrics.items()
        )
        parts.append(f'<div class="metrics">{metrics}</div>')
    return f'<div class="card" data-node-id="{escape(node.id, quote=True)}">{"".join(parts)}</div>'


def _markdown_body(node: Node) -> str:
    return f'<div class="prose">{render_markdown(node.content_md or "")}</div>'


def render_node_detail(node: Node) -> str:
    mode = detail_view_mode(node)
    if mode == DETAILS:
        return render_node_card(node)

    if mode == MARKDOWN:
        return (
            f'<div class="card" data-view="markdown">{_header(node)}{_categories(node)}'
            f"{_markdown_body(node)}</div>"
        )

    return (
        '<div class="card tabs" data-view="tabs">'
        f"{_header(node)}"
        '<div class="tab-bar">'
        '<button type="button" class="tab active" data-tab="markdown">Markdown</button>'
        '<button type="button" class="tab" data-tab="details">Details</button>'
        "</div>"
        f'<div class="tab-panel" data-panel="markdown">{_markdown_body(node)}</div>'
        f'<div class="tab-panel" data-panel="details" hidden>{render_node_card(node)}</div>'
        "</div>"
    )
