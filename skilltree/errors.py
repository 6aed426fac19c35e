"""Exception types shared by the DB layer, the upload handler and the HTTP layer.

Both request-level error classes subclass :class:`ValueError` so plain
``except ValueError`` callers keep working.
"""

from __future__ import annotations


class SkillTreeError(Exception):
    """Base class for all application errors."""

    status_code = 500


class ValidationError(SkillTreeError, ValueError):
    """A required field is missing or a reference is invalid (HTTP 400)."""

    status_code = 400


class ConflictError(ValidationError):
    """A uniqueness constraint was violated, e.g. a duplicate slug."""


class NotFoundError(SkillTreeError, ValueError):
    """The referenced project / node / edge does not exist (HTTP 404)."""

    status_code = 404


class UploadError(SkillTreeError):
    """Writing an uploaded file to disk failed (HTTP 500)."""
