"""Centralised settings for the Skill Tree app.

All runtime configuration is resolved here in one place.  Values can be
overridden via environment variables or a `.env` file in the project root
(loaded automatically when this module is imported).
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

# Load .env from the project root (two levels up from this file)
_env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_env_path, override=False)


@dataclass
class Settings:
    # ------------------------------------------------------------------
    # Workspace / storage
    # ------------------------------------------------------------------
    workspace_dir: Path = field(
        default_factory=lambda: Path(
            os.environ.get("SKILLTREE_WORKSPACE", Path.home() / ".skilltree_data")
        )
    )

    @property
    def db_path(self) -> Path:
        """Absolute path to the SQLite database file."""
        return self.workspace_dir / "skilltree.db"

    @property
    def schema_path(self) -> Path:
        """Absolute path to the schema SQL file bundled with the package."""
        return Path(__file__).resolve().parent / "db" / "schema.sql"

    # ------------------------------------------------------------------
    # Uploads / public URLs
    # ------------------------------------------------------------------
    upload_dir_override: str = field(
        default_factory=lambda: os.environ.get("SKILLTREE_UPLOAD_DIR", "")
    )
    upload_url_prefix: str = field(
        default_factory=lambda: os.environ.get("SKILLTREE_UPLOAD_URL_PREFIX", "/uploads")
    )
    public_base_url: str = field(
        default_factory=lambda: os.environ.get("SKILLTREE_PUBLIC_URL", "")
    )
    embed_cache_seconds: int = field(
        default_factory=lambda: int(os.environ.get("SKILLTREE_EMBED_CACHE_SECONDS", "3600"))
    )

    @property
    def upload_dir(self) -> Path:
        """Directory uploaded media is written to (served under ``upload_url_prefix``)."""
        if self.upload_dir_override:
            return Path(self.upload_dir_override)
        return self.workspace_dir / "public" / "uploads"

    # ------------------------------------------------------------------
    # Graph layout (2D) and scene (3D)
    # ------------------------------------------------------------------
    layout_node_width: int = field(
        default_factory=lambda: int(os.environ.get("LAYOUT_NODE_WIDTH", "260"))
    )
    layout_node_height: int = field(
        default_factory=lambda: int(os.environ.get("LAYOUT_NODE_HEIGHT", "120"))
    )
    layout_node_spacing: int = field(
        default_factory=lambda: int(os.environ.get("LAYOUT_NODE_SPACING", "32"))
    )
    layout_layer_spacing: int = field(
        default_factory=lambda: int(os.environ.get("LAYOUT_LAYER_SPACING", "60"))
    )
    scene_radius: float = field(
        default_factory=lambda: float(os.environ.get("SCENE_RADIUS", "3.0"))
    )

    # ------------------------------------------------------------------
    # Logging
    # ------------------------------------------------------------------
    log_level: str = field(
        default_factory=lambda: os.environ.get("SKILLTREE_LOG_LEVEL", "INFO")
    )

    def ensure_workspace(self) -> None:
        """Create the workspace directory if it does not exist."""
        self.workspace_dir.mkdir(parents=True, exist_ok=True)

    def layout_options(self) -> dict[str, int]:
        """Keyword arguments for :func:`skilltree.graph.layout.layout_graph`."""
        return {
            "node_width": self.layout_node_width,
            "node_height": self.layout_node_height,
            "node_spacing": self.layout_node_spacing,
            "layer_spacing": self.layout_layer_spacing,
        }


# Module-level singleton; import this everywhere:
#   from skilltree.config import settings
settings = Settings()
