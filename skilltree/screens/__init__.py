"""Screen controllers: form parsing and the project editor."""

from skilltree.screens.editor import ProjectEditor

__all__ = ["ProjectEditor"]
