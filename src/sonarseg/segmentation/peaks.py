import enum
from dataclasses import dataclass
from typing import List, NamedTuple, Optional

import numpy as np

from ..models.peak import PeakRecord
from .window import RunningWindow

class PeakState(enum.Enum):
    BACKGROUND = "background"
    IN_PEAK = "in_peak"

@dataclass
class PeakRun:
    """Extremes of the peak run currently open on a beam."""
    min_height: int
    min_bin: int
    max_height: int
    max_bin: int

    @classmethod
    def start(cls, height, bin):
        return cls(height, bin, height, bin)

    def update(self, height, bin):
        # A bin moves at most one extreme; ties never move either.
        if height > self.max_height:
            self.max_height = height
            self.max_bin = bin
        elif height < self.min_height:
            self.min_height = height
            self.min_bin = bin

class BinStep(NamedTuple):
    bin: int
    intensity: int
    mean: int
    state: PeakState
    record: Optional[PeakRecord]

class BeamTrace:
    """Per-bin history of one beam scan, used by calibration charts."""

    def __init__(self, intensity, mean, h_min, peaks, pixels):
        self.intensity = np.asarray(intensity, dtype=np.int64)
        self.mean = np.asarray(mean, dtype=np.int64)
        self.accept = self.mean + h_min
        self.peaks = peaks
        self.pixels = pixels

    @property
    def bins(self):
        return np.arange(len(self.intensity))

    def __len__(self):
        return len(self.intensity)

class PeakDetector:
    """
    Splits a beam into background bins and peak runs. A bin whose intensity
    exceeds the mean of the last background bins by more than `h_min` opens or
    extends a run; the run closes into a PeakRecord seeded at its highest bin.
    """
    def __init__(self, h_min=110, window_size=5, flush_trailing=False):
        self.h_min = int(h_min)
        self.window = RunningWindow(window_size)
        self.flush_trailing = bool(flush_trailing)

    @classmethod
    def from_config(cls, cfg):
        return cls(cfg.h_min, cfg.mean_window_size, flush_trailing=cfg.flush_trailing_peak)

    @property
    def window_size(self):
        return self.window.capacity

    @window_size.setter
    def window_size(self, size):
        self.window.resize(size)

    def steps(self, sampler, num_bins, beam=0):
        """Run the state machine over bins [0, num_bins) of `sampler`, one BinStep per bin."""
        window = self.window
        window.clear()
        state = PeakState.BACKGROUND
        run = None

        for b in range(num_bins):
            intensity = sampler.sample(b)
            mean = window.mean()
            height = intensity - mean
            record = None

            if height > self.h_min:
                if state is PeakState.BACKGROUND:
                    run = PeakRun.start(height, b)
                    state = PeakState.IN_PEAK
                else:
                    run.update(height, b)
            elif state is PeakState.IN_PEAK:
                record = self._close(run, mean, sampler, beam)
                run = None
                state = PeakState.BACKGROUND

            if state is PeakState.BACKGROUND:
                window.push(intensity)
            elif self.flush_trailing and b == num_bins - 1:
                record = self._close(run, mean, sampler, beam)

            yield BinStep(b, intensity, mean, state, record)

    def scan(self, sampler, num_bins, beam=0) -> List[PeakRecord]:
        return [s.record for s in self.steps(sampler, num_bins, beam) if s.record is not None]

    def trace(self, sampler, num_bins, beam=0) -> BeamTrace:
        intensity, mean, peaks, pixels = [], [], [], []
        for s in self.steps(sampler, num_bins, beam):
            intensity.append(s.intensity)
            mean.append(s.mean)
            pixels.append(sampler.pixel(s.bin))
            if s.record is not None:
                peaks.append(s.record)
        return BeamTrace(intensity, mean, self.h_min, peaks, pixels)

    @staticmethod
    def _close(run, mean, sampler, beam):
        row, col = sampler.position(run.max_bin)
        return PeakRecord(threshold=mean + run.min_height, row=row, col=col, beam=beam,
                          bin=run.max_bin, peak_height=run.max_height, background=mean)
