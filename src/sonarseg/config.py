import configparser
import logging
from typing import Optional, Protocol

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

SECTION_GENERAL = "General"
SECTION_PEAK_SEG = "PeakSegSearch"
SECTION_EXTRACTOR = "SegmentExtractor"

class PeakSegConfig(BaseModel):
    n_beams: int = Field(720, ge=0, description="Number of beams scanned across the fan")
    start_bin: int = Field(20, ge=0, description="Bins skipped near the sonar apex")
    h_min: int = Field(110, description="Minimum height above background for a peak bin")
    fov_deg: float = Field(130.0, ge=0.0, description="Angular field of view (degrees)")
    sonar_vertical_position: int = Field(1, description="Apex offset below the last image row (px)")
    min_sample_size: int = Field(10, ge=0, description="Smallest region kept (pixels)")
    mean_window_size: int = Field(5, ge=0, description="Background window length (bins)")
    flush_trailing_peak: bool = Field(False, description="Emit a peak run still open at the last bin")
    clip_beams_to_image: bool = Field(False, description="Shorten beams leaving the image instead of failing")

class ExtractorConfig(BaseModel):
    fragment_distance: int = Field(0, ge=0, description="Gap (px) region growth may bridge below threshold")

class AppConfig(BaseModel):
    peak_seg: PeakSegConfig = PeakSegConfig()
    extractor: ExtractorConfig = ExtractorConfig()

class ConfigSource(Protocol):
    """Key lookup returning the value, or None when the key is absent."""

    def get_int(self, section: str, key: str) -> Optional[int]: ...

    def get_float(self, section: str, key: str) -> Optional[float]: ...

    def get_bool(self, section: str, key: str) -> Optional[bool]: ...

class DictConfigSource:
    """In-memory source: {"Section": {"key": value}}."""

    def __init__(self, values=None):
        self.values = values or {}

    def _get(self, section, key, cast):
        raw = self.values.get(section, {}).get(key)
        if raw is None:
            return None
        try:
            return cast(raw)
        except (TypeError, ValueError):
            logger.warning("Ignoring malformed value %r for [%s] %s", raw, section, key)
            return None

    def get_int(self, section, key):
        return self._get(section, key, int)

    def get_float(self, section, key):
        return self._get(section, key, float)

    def get_bool(self, section, key):
        return self._get(section, key, _to_bool)

class IniConfigSource:
    """INI file source. Keys are case-sensitive, as written in the file."""

    def __init__(self, path):
        self.path = str(path)
        self._parser = configparser.ConfigParser()
        self._parser.optionxform = str
        with open(self.path, encoding="utf-8") as f:
            self._parser.read_file(f)

    def _get(self, section, key, getter):
        if not self._parser.has_option(section, key):
            return None
        try:
            return getter(section, key)
        except ValueError:
            logger.warning("Ignoring malformed value %r for [%s] %s in %s",
                           self._parser.get(section, key), section, key, self.path)
            return None

    def get_int(self, section, key):
        return self._get(section, key, self._parser.getint)

    def get_float(self, section, key):
        return self._get(section, key, self._parser.getfloat)

    def get_bool(self, section, key):
        return self._get(section, key, self._parser.getboolean)

def _to_bool(raw):
    if isinstance(raw, bool):
        return raw
    s = str(raw).strip().lower()
    if s in ("1", "true", "yes", "on"):
        return True
    if s in ("0", "false", "no", "off"):
        return False
    raise ValueError(raw)

# (field, getter, section, key) in application order; later entries win.
_PEAK_SEG_KEYS = [
    ("min_sample_size", "get_int", SECTION_GENERAL, "MinSampleSize"),
    ("sonar_vertical_position", "get_int", SECTION_PEAK_SEG, "sonVerticalPosition"),
    ("min_sample_size", "get_int", SECTION_PEAK_SEG, "minSampleSize"),
    ("n_beams", "get_int", SECTION_PEAK_SEG, "nBeams"),
    ("start_bin", "get_int", SECTION_PEAK_SEG, "startBin"),
    ("h_min", "get_int", SECTION_PEAK_SEG, "Hmin"),
    ("fov_deg", "get_float", SECTION_PEAK_SEG, "bearing"),
    ("mean_window_size", "get_int", SECTION_PEAK_SEG, "meanWindowSize"),
    ("flush_trailing_peak", "get_bool", SECTION_PEAK_SEG, "flushTrailingPeak"),
    ("clip_beams_to_image", "get_bool", SECTION_PEAK_SEG, "clipBeamsToImage"),
]

def _apply(model, source, keys):
    values = model.model_dump()
    for field, getter, section, key in keys:
        v = getattr(source, getter)(section, key)
        if v is not None:
            values[field] = v
    return type(model).model_validate(values)

def load_peak_seg_config(source: ConfigSource, base: Optional[PeakSegConfig] = None) -> PeakSegConfig:
    """Override `base` (defaults when None) with whatever keys `source` provides."""
    return _apply(base or PeakSegConfig(), source, _PEAK_SEG_KEYS)

def load_extractor_config(source: ConfigSource, base: Optional[ExtractorConfig] = None) -> ExtractorConfig:
    return _apply(base or ExtractorConfig(), source,
                  [("fragment_distance", "get_int", SECTION_EXTRACTOR, "fragmentDistance")])

def load_app_config(source: ConfigSource, base: Optional[AppConfig] = None) -> AppConfig:
    base = base or AppConfig()
    return AppConfig(
        peak_seg=load_peak_seg_config(source, base.peak_seg),
        extractor=load_extractor_config(source, base.extractor),
    )
