"""Domain models for notescope."""

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class PeakCandidate:
    """A local spectral maximum that passed the prominence test."""

    bin_index: int  # index into the magnitude array
    magnitude: float  # value the detector saw (normalized log-magnitude for notes)
    prominence: float  # drop to the nearest rise on either side
    pitch: Optional[int] = None  # nearest whole pitch number (A4 = 69)
    frequency: Optional[float] = None  # Hz, bin_index * bin size
    note_name: Optional[str] = None  # e.g. "A4"; None below the named range

    @property
    def display_name(self) -> str:
        """Human-readable note label."""
        return self.note_name or "?"


@dataclass
class FrameAnalysis:
    """Detected notes for one analysis frame."""

    time: float  # seconds
    resolution: int
    frequency_bin_size: float  # Hz
    peaks: List[PeakCandidate] = field(default_factory=list)

    @property
    def pitches(self) -> List[int]:
        """Sorted, de-duplicated pitch numbers of the detected peaks."""
        return sorted({p.pitch for p in self.peaks if p.pitch is not None})

    @property
    def note_names(self) -> List[str]:
        names = []
        for pitch in self.pitches:
            peak = next(p for p in self.peaks if p.pitch == pitch)
            names.append(peak.display_name)
        return names
