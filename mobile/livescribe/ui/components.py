"""Reusable Kivy components for the LiveScribe client."""

from __future__ import annotations

from kivy.factory import Factory
from kivy.lang import Builder
from kivy.properties import NumericProperty, StringProperty
from kivymd.uix.card import MDCard


class TranscriptBubbleCard(MDCard):
    """One transcript fragment; ``index`` mirrors the entry's arrival order."""

    text = StringProperty("")
    index = NumericProperty(0)


Factory.register("TranscriptBubbleCard", cls=TranscriptBubbleCard)

COMPONENT_KV = """
<LSScaffold@MDBoxLayout>:
    orientation: "vertical"
    padding: app.theme.spacing.toolbar, 0, app.theme.spacing.toolbar, app.theme.spacing.toolbar
    canvas.before:
        Color:
            rgba: app.theme.palette.background
        Rectangle:
            pos: self.pos
            size: self.size

<LSCard@MDCard>:
    orientation: "vertical"
    size_hint_y: None
    adaptive_height: True
    padding: app.theme.spacing.card_padding
    spacing: app.theme.spacing.grid
    radius: [18]
    md_bg_color: app.theme.palette.surface
    line_color: 0, 0, 0, 0

<SectionHeading@MDLabel>:
    font_style: app.theme.typography.title
    theme_text_color: "Custom"
    text_color: app.theme.palette.text_primary
    bold: True
    size_hint_y: None
    height: self.texture_size[1]

<EndpointInput@MDTextField>:
    mode: "rectangle"
    hint_text: "WebSocket URL"
    helper_text: "Applied on the next connect"
    helper_text_mode: "on_focus"
    text_color_focus: app.theme.palette.text_primary
    text_color_normal: app.theme.palette.text_secondary
    line_color_focus: app.theme.palette.accent_muted
    size_hint_y: None
    height: "64dp"

<ActionButton@MDFillRoundFlatIconButton>:
    size_hint_y: None
    height: "48dp"
    md_bg_color: app.theme.palette.surface_alt
    text_color: app.theme.palette.text_primary
    icon_color: app.theme.palette.accent_muted

<StartButton@ActionButton>:
    text: "Start Recording"
    icon: "microphone"
    md_bg_color: app.theme.palette.accent
    disabled: app.is_recording or not app.device_ready
    on_press: app.start_recording()

<StopButton@ActionButton>:
    text: "Stop Recording"
    icon: "stop"
    md_bg_color: app.theme.palette.danger
    disabled: not app.is_recording
    on_press: app.stop_recording()

<ConnectionBadge@MDBoxLayout>:
    orientation: "horizontal"
    adaptive_height: True
    spacing: app.theme.spacing.grid
    MDIcon:
        icon: "lan-connect" if app.connection_state == "open" else "lan-disconnect"
        theme_text_color: "Custom"
        text_color: app.theme.connection_color(app.connection_state)
        size_hint_x: None
        width: "28dp"
    MDLabel:
        text: "Connection: {}".format(app.connection_state)
        theme_text_color: "Custom"
        text_color: app.theme.palette.text_secondary
        font_style: app.theme.typography.caption

<LevelMeter@MDProgressBar>:
    size_hint_y: None
    height: "4dp"
    max: 1.0
    value: app.input_level
    color: app.theme.palette.live if app.is_recording else app.theme.palette.idle

<TranscriptBubble@TranscriptBubbleCard>:
    size_hint_y: None
    adaptive_height: True
    padding: app.theme.spacing.grid
    radius: [14]
    md_bg_color: app.theme.palette.bubble
    line_color: 0, 0, 0, 0
    MDLabel:
        text: root.text
        theme_text_color: "Custom"
        text_color: app.theme.palette.text_primary
        font_style: app.theme.typography.body
        text_size: self.width, None
        size_hint_y: None
        height: self.texture_size[1]

<ActivityLog@LSCard>:
    md_bg_color: app.theme.palette.surface_alt
    SectionHeading:
        text: "Activity"
    MDLabel:
        text: '\\n'.join(app.log_lines[-12:])
        theme_text_color: "Custom"
        text_color: app.theme.palette.text_muted
        font_style: app.theme.typography.caption
        text_size: self.width, None
        size_hint_y: None
        height: self.texture_size[1]
"""


def load_components() -> None:
    """Register shared KV component templates."""
    Builder.load_string(COMPONENT_KV)


__all__ = ["TranscriptBubbleCard", "load_components"]
