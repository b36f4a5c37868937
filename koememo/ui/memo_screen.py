"""Terminal presentation of a memo: recording controls, three text panels, copy/edit/save."""

import asyncio
import logging
from typing import Optional, Dict

from pubsub import pub
from rich.columns import Columns
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Prompt
from rich.text import Text

from ..models.audio import AudioArtifact
from ..models.session import MemoTexts, ProcessingState
from ..models.transcription import TextSlot
from ..services.memo_session import MemoSession
from ..services.state_publisher import STATE_TOPIC
from ..storage.exporter import MemoExporter
from .clipboard import copy_to_clipboard
from .line_reader import LineReader


logger = logging.getLogger(__name__)

PANEL_TITLES = {
    TextSlot.RAW: "Transcript",
    TextSlot.FILLER_REMOVED: "Fillers removed",
    TextSlot.CORRECTED: "Corrected",
}

STATE_LABELS = {
    ProcessingState.IDLE: ("Idle", "dim"),
    ProcessingState.RECORDING: ("Recording", "bold red"),
    ProcessingState.TRANSCRIBING: ("Transcribing audio...", "yellow"),
    ProcessingState.POST_PROCESSING: ("Removing fillers and correcting...", "yellow"),
    ProcessingState.DONE: ("Done", "bold green"),
    ProcessingState.ERRORED: ("Error", "bold red"),
}

SLOT_KEYS = {
    "1": TextSlot.RAW,
    "2": TextSlot.FILLER_REMOVED,
    "3": TextSlot.CORRECTED,
}


class MemoScreen:
    """Rich console front end for a MemoSession."""

    def __init__(self, session: MemoSession, exporter: Optional[MemoExporter] = None,
                 console: Optional[Console] = None, topic: str = STATE_TOPIC,
                 reader: Optional[LineReader] = None):
        """Initialize memo screen.

        Args:
            session: Memo session to drive
            exporter: Where 'save' writes files (None disables saving)
            console: Rich console (a new one by default)
            topic: Pub/sub topic carrying state changes
            reader: Source of typed lines (stdin by default)
        """
        self.console = console or Console()
        self.session = session
        self.exporter = exporter
        self.topic = topic
        self.reader = reader or LineReader()
        pub.subscribe(self._on_state_change, topic)

    def _on_state_change(self, state: ProcessingState, texts: MemoTexts, error: Optional[str]) -> None:
        label, style = STATE_LABELS[state]
        self.console.print(Text(label, style=style))
        if state is ProcessingState.ERRORED and error:
            self.console.print(Text(error, style="red"))

    def render(self, texts: MemoTexts) -> Columns:
        """Build the three side-by-side panels."""
        panels = []
        for slot in TextSlot:
            text = texts.get(slot)
            if text:
                body = Text(text)
                border = "green"
            elif slot in texts.errors:
                body = Text(texts.errors[slot], style="red italic")
                border = "red"
            else:
                body = Text("(empty)", style="dim italic")
                border = "dim"
            panels.append(Panel(body, title=PANEL_TITLES[slot], border_style=border))
        return Columns(panels, equal=True, expand=True)

    def show(self) -> None:
        self.console.print(self.render(self.session.texts))
        if self.session.error_message and self.session.state is ProcessingState.DONE:
            self.console.print(Text(self.session.error_message, style="yellow"))

    def _wait_for_stop(self, duration: Optional[float]) -> None:
        capture = self.session.capture
        if duration:
            capture.wait_until_stopped(duration)
            return
        while True:
            if capture.wait_until_stopped(0):
                self.console.print(Text("Maximum recording length reached", style="yellow"))
                return
            # Enter or end of input stops the recording
            if self.reader.readline(timeout=0.1) is not None:
                return

    async def record(self, duration: Optional[float] = None) -> MemoTexts:
        """Record until Enter, duration, or the capture ceiling, then process."""
        if not self.session.start_recording():
            return self.session.texts

        if duration:
            self.console.print(f"Recording for {duration:.0f}s...")
        else:
            self.console.print("Recording... press [bold]Enter[/bold] to stop")
        await asyncio.to_thread(self._wait_for_stop, duration)

        texts = await self.session.stop_recording()
        self.show()
        return texts

    async def transcribe(self, artifact: AudioArtifact) -> MemoTexts:
        texts = await self.session.process_artifact(artifact)
        self.show()
        return texts

    def copy(self, slot: TextSlot) -> bool:
        text = self.session.texts.get(slot)
        if not text:
            self.console.print(Text(f"{PANEL_TITLES[slot]} is empty", style="yellow"))
            return False
        if copy_to_clipboard(text):
            self.console.print(Text(f"Copied {PANEL_TITLES[slot]}", style="green"))
            return True
        self.console.print(Text("Clipboard is not available", style="red"))
        return False

    def save(self, include_audio: bool = True) -> Dict[TextSlot, str]:
        if self.exporter is None:
            return {}
        session_id = self.exporter.create_session_directory()
        paths = self.exporter.save_texts(self.session.texts, session_id)
        if include_audio and self.session.last_artifact is not None:
            self.exporter.save_audio(self.session.last_artifact, session_id)
        for slot, path in paths.items():
            self.console.print(f"Saved {PANEL_TITLES[slot]} to {path}")
        return paths

    def _ask_slot(self) -> TextSlot:
        key = Prompt.ask("Which text? 1=transcript 2=fillers removed 3=corrected",
                         choices=list(SLOT_KEYS), default="3", console=self.console,
                         stream=self.reader)
        return SLOT_KEYS[key]

    def interact(self) -> None:
        """Copy / edit / save loop after a memo is done."""
        while True:
            action = Prompt.ask("[c]opy, [e]dit, [s]ave, [q]uit",
                                choices=["c", "e", "s", "q"], default="q", console=self.console,
                                stream=self.reader)
            if action == "q":
                return
            if action == "c":
                self.copy(self._ask_slot())
            elif action == "e":
                slot = self._ask_slot()
                new_text = Prompt.ask("New text", default=self.session.texts.get(slot) or "",
                                      console=self.console, stream=self.reader)
                self.session.edit(slot, new_text)
                self.show()
            elif action == "s":
                if self.exporter is None:
                    self.console.print(Text("No output directory configured", style="yellow"))
                else:
                    self.save()

    def close(self) -> None:
        pub.unsubscribe(self._on_state_change, self.topic)
