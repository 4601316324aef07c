"""
Concrete transcript sources.

The on-device speech engine itself is out of scope; these sources cover
direct text entry and replaying recorded engine output.
"""

from typing import Iterable, Optional

from src.services.speech.interface import BaseTranscriptSource


class TypedTranscriptSource(BaseTranscriptSource):
    """
    Direct text entry.

    Every edit replaces the whole text and is final straight away.
    Typing while a session is listening stops that session first.
    """

    def set_text(self, text: str) -> None:
        if self.state.is_listening:
            self.stop()

        self._set_state(transcript=text, interim_transcript="", error=None)

        if text.strip() and self._on_transcript is not None:
            self._on_transcript(text.strip())


class ScriptedTranscriptSource(BaseTranscriptSource):
    """
    Replays recorded engine output.

    Each batch is a list of (text, is_final) pairs, delivered exactly as a
    recognition engine would deliver one result event.
    """

    def __init__(
        self,
        batches: Iterable[list[tuple[str, bool]]],
        error_code: Optional[str] = None,
        **kwargs,
    ):
        super().__init__(**kwargs)
        self._batches = [list(batch) for batch in batches]
        self._error_code = error_code

    def play(self) -> None:
        """Start a session, deliver every batch, then end it."""
        self.start()
        if not self.state.is_listening:
            return

        for batch in self._batches:
            if not self.state.is_listening:
                break
            self.handle_result(batch)

        if self._error_code is not None:
            self.handle_error(self._error_code)

        self.handle_end()
