"""Central theme tokens for the Kivy client."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from kivy.metrics import dp

Color = Tuple[float, float, float, float]


def rgba(value: str, alpha: float = 1.0) -> Color:
    """Convert hex to normalized RGBA."""
    value = value.lstrip("#")
    if len(value) != 6:
        raise ValueError(f"Expected 6 hex chars, got {value!r}")
    r = int(value[0:2], 16) / 255.0
    g = int(value[2:4], 16) / 255.0
    b = int(value[4:6], 16) / 255.0
    return (r, g, b, alpha)


@dataclass(frozen=True)
class Palette:
    background: Color
    surface: Color
    surface_alt: Color
    bubble: Color
    accent: Color
    accent_muted: Color
    live: Color
    pending: Color
    danger: Color
    idle: Color
    text_primary: Color
    text_secondary: Color
    text_muted: Color


@dataclass(frozen=True)
class Typography:
    title: str
    subtitle: str
    body: str
    caption: str


@dataclass(frozen=True)
class Spacing:
    grid: float
    section: float
    card_padding: float
    toolbar: float


@dataclass(frozen=True)
class LiveScribeTheme:
    palette: Palette
    typography: Typography
    spacing: Spacing

    def connection_color(self, state: str) -> Color:
        """Badge colour for a ``ConnectionState`` value."""
        return {
            "open": self.palette.live,
            "connecting": self.palette.pending,
            "failed": self.palette.danger,
        }.get(state, self.palette.idle)

    @staticmethod
    def default() -> "LiveScribeTheme":
        palette = Palette(
            background=rgba("#0E1116"),
            surface=rgba("#161B22"),
            surface_alt=rgba("#1F2630"),
            bubble=rgba("#232C38"),
            accent=rgba("#3D8BFD"),
            accent_muted=rgba("#79AFFF"),
            live=rgba("#3FB950"),
            pending=rgba("#D29922"),
            danger=rgba("#F85149"),
            idle=rgba("#6E7681"),
            text_primary=rgba("#F0F6FC"),
            text_secondary=rgba("#C9D1D9"),
            text_muted=rgba("#8B949E"),
        )
        typography = Typography(
            title="H6",
            subtitle="Subtitle1",
            body="Body1",
            caption="Caption",
        )
        spacing = Spacing(
            grid=dp(10),
            section=dp(16),
            card_padding=dp(16),
            toolbar=dp(8),
        )
        return LiveScribeTheme(palette=palette, typography=typography, spacing=spacing)


__all__ = ["LiveScribeTheme", "Palette", "Typography", "Spacing", "rgba"]
