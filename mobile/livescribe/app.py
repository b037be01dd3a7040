"""Kivy entrypoint for the LiveScribe client."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from kivy.clock import Clock
from kivy.factory import Factory
from kivy.lang import Builder
from kivy.properties import BooleanProperty, ListProperty, NumericProperty, ObjectProperty, StringProperty
from kivymd.app import MDApp
from kivymd.uix.snackbar import Snackbar

from .audio.capture import AudioCapture, DeviceUnavailable
from .config import CONFIG
from .services.logger import LogBuffer
from .services.session import SessionController, SessionState
from .services.stream import (
    ConnectionClosed,
    ConnectionOpened,
    ConnectionState,
    InvalidEndpoint,
    StreamError,
    StreamEvent,
    TranscriptStream,
)
from .store.settings_store import SettingsStore
from .store.transcript_log import TranscriptEntry, TranscriptLog
from .ui.components import load_components
from .ui.theme import LiveScribeTheme


SCREEN_KV = """
MDScreen:
    LSScaffold:
        spacing: app.theme.spacing.section
        MDTopAppBar:
            title: "Audio Recorder"
            md_bg_color: app.theme.palette.surface
            specific_text_color: app.theme.palette.text_primary
            elevation: 0
        LSCard:
            EndpointInput:
                id: endpoint_input
                text: app.endpoint
                on_text_validate: app.apply_endpoint(self.text)
            MDBoxLayout:
                orientation: "horizontal"
                adaptive_height: True
                spacing: app.theme.spacing.grid
                ActionButton:
                    text: "Connect"
                    icon: "link-variant"
                    on_press: app.apply_endpoint(endpoint_input.text)
                ConnectionBadge:
            MDBoxLayout:
                orientation: "horizontal"
                adaptive_height: True
                spacing: app.theme.spacing.grid
                StartButton:
                StopButton:
            LevelMeter:
        ScrollView:
            do_scroll_x: False
            MDBoxLayout:
                id: transcript_list
                orientation: "vertical"
                spacing: app.theme.spacing.grid
                size_hint_y: None
                height: self.minimum_height
        ActivityLog:
"""


class LiveScribeApp(MDApp):
    is_recording = BooleanProperty(False)
    device_ready = BooleanProperty(True)
    connection_state = StringProperty(ConnectionState.CLOSED.value)
    endpoint = StringProperty("")
    input_level = NumericProperty(0.0)
    log_lines = ListProperty([])
    theme = ObjectProperty(LiveScribeTheme.default())

    def build(self):
        load_components()
        self.theme_cls.theme_style = "Dark"
        self.theme_cls.primary_palette = "Blue"
        self.base_dir = Path(self.user_data_dir or Path.home() / ".livescribe")
        self.base_dir.mkdir(parents=True, exist_ok=True)
        self.settings_store = SettingsStore(self.base_dir / CONFIG.settings_file)
        self.endpoint = self.settings_store.get().endpoint
        self.logger = LogBuffer(CONFIG.log_history)
        self.transcript = TranscriptLog()
        self.stream = TranscriptStream(self.logger)
        self.controller = SessionController(self.stream, self.transcript, self.logger, self._make_capture)
        self.stream.subscribe(self._on_stream_event)
        self.controller.subscribe(self._on_session_state)
        self.transcript.subscribe(self._on_entry)
        return Builder.load_string(SCREEN_KV)

    def on_start(self):
        Clock.schedule_interval(lambda dt: self._sync_log(), 0.5)
        self._connect(self.endpoint)

    def on_stop(self):
        self.controller.stop_recording()
        self.stream.close()

    def start_recording(self):
        asyncio.ensure_future(self._start_recording())

    async def _start_recording(self) -> None:
        try:
            await self.controller.start_recording()
        except DeviceUnavailable as exc:
            self.device_ready = False
            self._show_snackbar(f"Microphone unavailable: {exc}")

    def stop_recording(self):
        self.controller.stop_recording()
        self.input_level = 0.0

    def apply_endpoint(self, text: str):
        try:
            if not self.stream.ensure_connected(text):
                return
        except InvalidEndpoint as exc:
            self.logger.add(str(exc), level=logging.WARNING)
            self._show_snackbar(str(exc))
            return
        endpoint = self.stream.endpoint or ""
        self.settings_store.update(endpoint=endpoint)
        self.endpoint = endpoint
        self.connection_state = self.stream.state.value
        self._show_snackbar(f"Endpoint set to {endpoint}")

    def _connect(self, endpoint: str) -> None:
        try:
            self.stream.connect(endpoint)
        except InvalidEndpoint as exc:
            self.logger.add(str(exc), level=logging.WARNING)
        self.connection_state = self.stream.state.value

    def _make_capture(self, on_chunk, on_complete) -> AudioCapture:
        return AudioCapture(
            on_chunk,
            on_complete,
            self.logger,
            device=self.settings_store.input_device(),
            level_callback=self._update_input_level,
        )

    def _on_stream_event(self, event: StreamEvent) -> None:
        if isinstance(event, (ConnectionOpened, ConnectionClosed, StreamError)):
            self.connection_state = self.stream.state.value

    def _on_session_state(self, state: SessionState) -> None:
        self.is_recording = state is SessionState.RECORDING
        if not self.is_recording:
            self.input_level = 0.0

    def _on_entry(self, entry: TranscriptEntry) -> None:
        if self.root:
            bubble = Factory.TranscriptBubble(text=entry.text, index=entry.index)
            self.root.ids.transcript_list.add_widget(bubble)

    def _update_input_level(self, level: float) -> None:
        if self.is_recording:
            self.input_level = level

    def _sync_log(self) -> None:
        lines = self.logger.get()
        if lines != list(self.log_lines):
            self.log_lines = lines

    def _show_snackbar(self, text: str) -> None:
        def _display(*_):
            Snackbar(
                text=text,
                duration=1.8,
                bg_color=self.theme.palette.surface_alt,
            ).open()

        Clock.schedule_once(_display, 0)


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")
    app = LiveScribeApp()

    async def _run() -> None:
        await app.async_run(async_lib="asyncio")
        await app.stream.shutdown()

    asyncio.run(_run())


if __name__ == "__main__":
    main()
