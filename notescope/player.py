"""Playback position provider for the analyzer.

Audio output is not part of this package; the cursor only tracks where in the
file the analyzer should look.
"""

from typing import Optional

from .audio_file import AudioFile


class PlaybackCursor:
    """Tracks a playback position in seconds over an :class:`AudioFile`."""

    def __init__(self, audio: Optional[AudioFile] = None):
        self._audio = audio
        self._position = 0.0

    @property
    def audio(self) -> Optional[AudioFile]:
        return self._audio

    @audio.setter
    def audio(self, audio: Optional[AudioFile]):
        self._audio = audio
        self.rewind()

    @property
    def is_loaded(self) -> bool:
        return self._audio is not None and self._audio.is_loaded

    @property
    def duration(self) -> float:
        return self._audio.duration if self._audio is not None else 0.0

    @property
    def position(self) -> float:
        return self._position

    @position.setter
    def position(self, time: float):
        self._position = min(max(time, 0.0), self.duration)

    @property
    def is_finished(self) -> bool:
        return self.position > self.duration - 0.001

    def advance(self, seconds: float) -> float:
        """Move the cursor forward, clamped to the end of the file."""
        self.position = self._position + seconds
        return self._position

    def rewind(self):
        self._position = 0.0
