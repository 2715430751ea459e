"""Threshold-ordered region extraction seeded by beam intensity peaks.

Peaks from every beam are gathered first, then grown into regions from the
lowest threshold to the highest against one visited mask. Growing weak peaks
first lets them claim the dim halo of small objects before a stronger, wider
flood could absorb it, which keeps one object from being split into many
regions. A pixel taken by an earlier region is never available to a later one;
this holds for regions dropped for being too small as well.
"""
import logging
from operator import attrgetter
from typing import List, Optional, Protocol

from ..config import PeakSegConfig, load_peak_seg_config
from ..models.peak import PeakRecord
from ..models.sonar import SonarFan
from ..utils.geometry import BeamSampler
from .peaks import PeakDetector

logger = logging.getLogger(__name__)

class RegionGrower(Protocol):
    def set_threshold(self, value) -> None: ...

    def create_segment(self, seg, image, row: int, col: int): ...

class SegmentStore(Protocol):
    def reset_mask(self, rows: int, cols: int) -> None: ...

    def segment(self, index: int): ...

class PeakOrderingSegmenter:
    def __init__(self, extractor: RegionGrower, pool: SegmentStore,
                 config: Optional[PeakSegConfig] = None):
        self.extractor = extractor
        self.pool = pool
        self.config = config or PeakSegConfig()
        self.segments = []

    def load(self, source):
        """Override the current parameters with the keys `source` provides."""
        self.config = load_peak_seg_config(source, self.config)

    def find_peaks(self, image) -> List[PeakRecord]:
        """Scan every beam of `image`; records come out beam by beam, bin by bin."""
        cfg = self.config
        fan = SonarFan.from_config(cfg, image.shape)
        detector = PeakDetector.from_config(cfg)
        peaks = []
        for beam in range(fan.num_beams):
            sampler = BeamSampler.for_beam(image, fan, beam)
            num_bins = fan.num_bins
            if cfg.clip_beams_to_image:
                num_bins = sampler.bins_inside(num_bins)
            peaks.extend(detector.scan(sampler, num_bins, beam))
        logger.debug("%d peaks on %d beams x %d bins", len(peaks), fan.num_beams, fan.num_bins)
        return peaks

    def extract(self, image, peaks):
        """Grow one region per peak in ascending threshold order; keep the large ones."""
        self.segments = []
        rows, cols = image.shape[:2]
        self.pool.reset_mask(rows, cols)

        kept = 0
        for peak in sorted(peaks, key=attrgetter("threshold")):
            seg = self.pool.segment(kept)
            self.extractor.set_threshold(peak.threshold)
            row, col = peak.seed
            self.extractor.create_segment(seg, image, row, col)
            if seg.n >= self.config.min_sample_size:
                kept += 1
                self.segments.append(seg)

        logger.debug("kept %d of %d regions (min size %d)",
                     kept, len(peaks), self.config.min_sample_size)
        return self.segments

    def segment(self, image):
        return self.extract(image, self.find_peaks(image))
