import logging
import os
from typing import List, NamedTuple, Tuple

import numpy as np

from .config import PeakSegConfig
from .models.peak import PeakRecord
from .models.sonar import SonarFan
from .regions.extractor import RegionExtractor
from .regions.segment import SegmentPool
from .segmentation.peaks import BeamTrace, PeakDetector
from .utils.geometry import BeamSampler
from .utils.sonar_viz import render_beam_chart, render_calibration_mask, save_png

logger = logging.getLogger(__name__)

BEARING_LIMIT_DEG = 65.0
BEARING_STEP_DEG = 1.0
H_MIN_STEP = 2
CLOSE_KEYS = ("\r", "\n", "\x1b")

class CalibrationResult(NamedTuple):
    bearing_deg: float
    h_min: int
    window_size: int
    trace: BeamTrace
    # (peak index on the beam, peak, grown pixels) in growth order
    regions: List[Tuple[int, PeakRecord, list]]

def calibration_filenames(bearing_deg, h_min, window_size):
    tag = f"B{bearing_deg + 0.0:.1f}_Hp{h_min}_Wsz{window_size}"  # +0.0 turns -0.0 into 0.0
    return f"CalibResult_{tag}.png", f"CalibPlot_{tag}.png"

class CalibrationSession:
    """Re-scans one beam at an adjustable bearing and grows every peak found on it."""
    def __init__(self, image, config=None, extractor=None, pool=None, export_dir="."):
        self.image = image
        self.config = config or PeakSegConfig()
        self.extractor = extractor or RegionExtractor()
        self.pool = pool or SegmentPool()
        self.export_dir = export_dir
        self.fan = SonarFan.from_config(self.config, image.shape)
        self.detector = PeakDetector.from_config(self.config)
        self.bearing_deg = -self.config.fov_deg / 2.0
        self.result = None

    @property
    def h_min(self):
        return self.detector.h_min

    @property
    def window_size(self):
        return self.detector.window_size

    def run(self) -> CalibrationResult:
        fan = self.fan
        sampler = BeamSampler(self.image, np.deg2rad(self.bearing_deg), fan.start_bin, fan.apex)
        # the beam can be steered past the image edge; chart only its in-image part
        num_bins = sampler.bins_inside(fan.num_bins)
        trace = self.detector.trace(sampler, num_bins)

        rows, cols = self.image.shape[:2]
        self.pool.reset_mask(rows, cols)
        regions = []
        order = sorted(enumerate(trace.peaks), key=lambda ip: ip[1].threshold)
        for idx, peak in order:
            seg = self.pool.segment(0)
            self.extractor.set_threshold(peak.threshold)
            self.extractor.create_segment(seg, self.image, *peak.seed)
            regions.append((idx, peak, list(seg.pixels)))

        self.result = CalibrationResult(self.bearing_deg, self.h_min, self.window_size, trace, regions)
        return self.result

    def handle_key(self, key):
        """Apply one key press. Returns False when the session should close."""
        if key in CLOSE_KEYS:
            return False
        if key == "a":
            if self.bearing_deg < BEARING_LIMIT_DEG:
                self.bearing_deg += BEARING_STEP_DEG
        elif key == "d":
            if self.bearing_deg > -BEARING_LIMIT_DEG:
                self.bearing_deg -= BEARING_STEP_DEG
        elif key == "w":
            self.detector.h_min += H_MIN_STEP
        elif key == "s":
            if self.detector.h_min >= H_MIN_STEP:
                self.detector.h_min -= H_MIN_STEP
        elif key == "r":
            self.detector.window_size = self.window_size + 1
        elif key == "f":
            if self.window_size > 0:
                self.detector.window_size = self.window_size - 1
        elif key == "p":
            self.export()
        logger.info("bearing %.1f Hmin %d meanWindowSize %d",
                    self.bearing_deg, self.h_min, self.window_size)
        return True

    def export(self, directory=None):
        """Write the annotated mask and the beam chart; returns both paths."""
        result = self.result if self.result is not None else self.run()
        directory = self.export_dir if directory is None else directory
        mask_name, plot_name = calibration_filenames(result.bearing_deg, result.h_min, result.window_size)
        mask_path = os.path.join(directory, mask_name)
        plot_path = os.path.join(directory, plot_name)
        save_png(render_calibration_mask(self.image, result), mask_path)
        save_png(render_beam_chart(result.trace), plot_path)
        logger.info("saved %s and %s", mask_path, plot_path)
        return mask_path, plot_path
