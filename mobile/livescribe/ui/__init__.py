"""UI helpers (theme, reusable widgets)."""

from .theme import LiveScribeTheme, Palette, Spacing, Typography, rgba

__all__ = ["LiveScribeTheme", "Palette", "Spacing", "Typography", "rgba"]
