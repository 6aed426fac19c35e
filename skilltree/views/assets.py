"""Access to the JS / CSS files bundled in ``skilltree/views/static/``."""

from __future__ import annotations

from functools import lru_cache
from importlib.resources import files

BASE_URL_PLACEHOLDER = "__SKILLTREE_BASE_URL__"


@lru_cache(maxsize=None)
def read_asset(name: str) -> str:
    """Return the text of a bundled asset (read once per process)."""
    return files("skilltree.views").joinpath("static", name).read_text(encoding="utf-8")


def build_embed_script(base_url: str = "") -> str:
    """The ``/embed`` bootstrap script with its API base URL filled in."""
    return read_asset("embed.js").replace(BASE_URL_PLACEHOLDER, base_url.rstrip("/"))
