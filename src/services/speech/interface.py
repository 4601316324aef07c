"""
Transcript Source Interface

DESIGN DECISION: Capturing text (speech or typing) is stateful and
event-driven; parsing is not. The capture side is modelled here as a
capability (start / stop / reset / subscribe) so the parser and its tests
never depend on timing or event machinery.

BaseTranscriptSource implements the recognition state machine:
- start        -> LISTENING
- results      -> final text is accumulated, interim text replaced
- error        -> ERROR with a user-facing message ('aborted' is ignored)
- end          -> IDLE, but only if still LISTENING
- unsupported  -> UNAVAILABLE
Concrete sources only plug in the engine calls.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Callable, Iterable, Optional

import structlog
from pydantic import BaseModel, ConfigDict

from src.config import get_settings


class TranscriptStatus(str, Enum):
    """Lifecycle of a transcript source."""
    IDLE = "idle"
    LISTENING = "listening"
    ERROR = "error"
    UNAVAILABLE = "unavailable"


class TranscriptState(BaseModel):
    """Snapshot published to subscribers on every change."""
    model_config = ConfigDict(frozen=True)

    status: TranscriptStatus = TranscriptStatus.IDLE
    transcript: str = ""
    interim_transcript: str = ""
    error: Optional[str] = None

    @property
    def current_text(self) -> str:
        """Best-known text so far: final transcript plus pending interim text."""
        return self.transcript + self.interim_transcript

    @property
    def is_listening(self) -> bool:
        return self.status == TranscriptStatus.LISTENING


RECOGNITION_ERROR_MESSAGES = {
    "no-speech": "No speech detected.",
    "audio-capture": "Microphone not available.",
    "not-allowed": "Microphone permission denied.",
    "network": "Network error during recognition.",
}
DEFAULT_ERROR_MESSAGE = "Speech recognition error occurred."
UNSUPPORTED_MESSAGE = "Speech recognition is not available."
START_FAILED_MESSAGE = "Failed to start speech recognition."

# Not errors from the user's point of view
IGNORED_ERROR_CODES = frozenset({"aborted"})

TranscriptListener = Callable[[TranscriptState], None]


class TranscriptSourceError(Exception):
    """Raised by an engine that cannot start or stop."""
    pass


class TranscriptSourceInterface(ABC):
    """Capability every transcript provider offers to the quick-add flow."""

    @property
    @abstractmethod
    def state(self) -> TranscriptState:
        pass

    @property
    @abstractmethod
    def is_supported(self) -> bool:
        pass

    @abstractmethod
    def start(self) -> None:
        pass

    @abstractmethod
    def stop(self) -> None:
        pass

    @abstractmethod
    def reset(self) -> None:
        pass

    @abstractmethod
    def subscribe(self, listener: TranscriptListener) -> Callable[[], None]:
        """
        Register a listener for state changes.

        Returns:
            A callable that removes the listener again
        """
        pass


class BaseTranscriptSource(TranscriptSourceInterface):
    """
    Shared state machine for transcript sources.

    Subclasses override _engine_start / _engine_stop and feed engine
    events into handle_result / handle_error / handle_end.
    """

    def __init__(
        self,
        supported: bool = True,
        on_transcript: Optional[Callable[[str], None]] = None,
        language: Optional[str] = None,
        continuous: Optional[bool] = None,
        interim_results: Optional[bool] = None,
    ):
        """
        Args:
            supported: Whether the underlying engine exists at all
            on_transcript: Called with the trimmed final transcript
                           whenever new final text arrives
            language, continuous, interim_results: Engine options.
                           If None, taken from the speech settings.
        """
        speech = get_settings().speech
        self.language = language if language is not None else speech.language
        self.continuous = continuous if continuous is not None else speech.continuous
        self.interim_results = (
            interim_results if interim_results is not None else speech.interim_results
        )

        self._supported = supported
        self._on_transcript = on_transcript
        self._listeners: list[TranscriptListener] = []
        self._logger = structlog.get_logger()

        if supported:
            self._state = TranscriptState()
        else:
            self._state = TranscriptState(
                status=TranscriptStatus.UNAVAILABLE,
                error="Speech recognition is not supported on this device.",
            )

    # -- capability -----------------------------------------------------------

    @property
    def state(self) -> TranscriptState:
        return self._state

    @property
    def is_supported(self) -> bool:
        return self._supported

    def subscribe(self, listener: TranscriptListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def start(self) -> None:
        if not self._supported:
            self._set_state(status=TranscriptStatus.UNAVAILABLE, error=UNSUPPORTED_MESSAGE)
            return

        if self._state.is_listening:
            # Already started
            return

        try:
            self._engine_start()
        except TranscriptSourceError as e:
            self._logger.warning("transcript_start_failed", error=str(e))
            self._set_state(status=TranscriptStatus.ERROR, error=START_FAILED_MESSAGE)
            return

        self._set_state(status=TranscriptStatus.LISTENING, error=None)

    def stop(self) -> None:
        if not self._supported:
            return
        try:
            self._engine_stop()
        except TranscriptSourceError as e:
            self._logger.warning("transcript_stop_failed", error=str(e))
            return
        self._set_state(status=TranscriptStatus.IDLE)

    def reset(self) -> None:
        self.stop()
        if self._supported:
            self._set_state(
                status=TranscriptStatus.IDLE,
                transcript="",
                interim_transcript="",
                error=None,
            )

    # -- engine events --------------------------------------------------------

    def handle_result(self, results: Iterable[tuple[str, bool]]) -> None:
        """
        Apply one batch of (text, is_final) results.

        Final pieces are appended to the transcript followed by a space;
        interim pieces replace the previous interim text.
        """
        final = ""
        interim = ""
        for text, is_final in results:
            if is_final:
                final += text + " "
            elif self.interim_results:
                interim += text

        transcript = self._state.transcript + final
        self._set_state(transcript=transcript, interim_transcript=interim)

        if final.strip() and self._on_transcript is not None:
            self._on_transcript(transcript.strip())

        # A non-continuous session ends with its first final result
        if final and not self.continuous:
            self.handle_end()

    def handle_error(self, code: str) -> None:
        if code in IGNORED_ERROR_CODES:
            return
        message = RECOGNITION_ERROR_MESSAGES.get(code, DEFAULT_ERROR_MESSAGE)
        self._logger.warning("transcript_error", code=code)
        self._set_state(status=TranscriptStatus.ERROR, error=message)

    def handle_end(self) -> None:
        # Only an active session falls back to idle
        if self._state.is_listening:
            self._set_state(status=TranscriptStatus.IDLE)

    # -- engine hooks ---------------------------------------------------------

    def _engine_start(self) -> None:
        pass

    def _engine_stop(self) -> None:
        pass

    def _set_state(self, **changes) -> None:
        self._state = self._state.model_copy(update=changes)
        for listener in list(self._listeners):
            listener(self._state)
