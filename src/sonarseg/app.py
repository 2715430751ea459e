import argparse
import configparser
import logging
import sys

import numpy as np
from PIL import Image
from pydantic import ValidationError

from .config import AppConfig, IniConfigSource, load_app_config
from .regions.extractor import RegionExtractor
from .regions.segment import SegmentPool
from .segmentation.segmenter import PeakOrderingSegmenter
from .utils.geometry import OutOfBoundsError
from .utils.sonar_viz import render_overlay, save_png

logger = logging.getLogger(__name__)

_NATIVE_MODES = ("L", "I", "I;16", "I;16B", "I;16L")

def load_image(path):
    """Load a sonar image as a 2D integer array; colour images are converted to gray."""
    with Image.open(path) as im:
        if im.mode not in _NATIVE_MODES:
            im = im.convert("L")
        return np.array(im)

def build_segmenter(cfg: AppConfig):
    extractor = RegionExtractor.from_config(cfg.extractor)
    return PeakOrderingSegmenter(extractor, SegmentPool(), cfg.peak_seg)

def run_calibration(image, cfg: AppConfig):
    from PyQt5 import QtWidgets
    from .calibration import CalibrationSession
    from .gui.calibration_window import CalibrationWindow

    app = QtWidgets.QApplication(sys.argv[:1])
    session = CalibrationSession(image, cfg.peak_seg, RegionExtractor.from_config(cfg.extractor))
    w = CalibrationWindow(session)
    w.setWindowTitle("sonarseg calibration")
    w.resize(1400, 700)
    w.show()
    return app.exec_()

def main(argv=None):
    ap = argparse.ArgumentParser(prog="sonarseg",
                                 description="Segment a sonar fan image into candidate object regions.")
    ap.add_argument("image", help="sonar image (8 or 16 bit gray)")
    ap.add_argument("--config", help="INI file overriding the default parameters")
    ap.add_argument("--overlay", help="write the kept regions over the image to this PNG")
    ap.add_argument("--calibrate", action="store_true", help="open the interactive single-beam tuning window")
    ap.add_argument("-v", "--verbose", action="store_true")
    args = ap.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    try:
        cfg = load_app_config(IniConfigSource(args.config)) if args.config else AppConfig()
    except (OSError, configparser.Error, ValidationError) as e:
        logger.error("cannot load config %s: %s", args.config, e)
        return 1

    try:
        image = load_image(args.image)
    except OSError as e:
        logger.error("cannot read image %s: %s", args.image, e)
        return 1

    if args.calibrate:
        return run_calibration(image, cfg)

    try:
        segments = build_segmenter(cfg).segment(image)
    except OutOfBoundsError as e:
        logger.error("%s; set clipBeamsToImage to shorten beams at the image edge", e)
        return 1
    logger.info("%d regions in %s (%dx%d)", len(segments), args.image, image.shape[1], image.shape[0])
    for i, seg in enumerate(segments):
        print(f"{i}\tn={seg.n}\tthreshold={seg.threshold}\tseed={seg.seed}\tbbox={seg.bounding_box()}"
              f"\tmean={seg.mean_intensity(image):.1f}")

    if args.overlay:
        save_png(render_overlay(image, segments), args.overlay)
        logger.info("overlay written to %s", args.overlay)
    return 0

if __name__ == "__main__":
    sys.exit(main())
