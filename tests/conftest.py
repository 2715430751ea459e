import numpy as np
import pytest

from sonarseg.config import PeakSegConfig

# Background rising slowly enough (height <= 20 per bin, window 3) to settle at
# 50 without being taken for a peak; an empty window starts the mean at 0.
LEAD_IN_50 = [0, 15, 25, 33, 44, 50, 50, 50, 50]

class ListSampler:
    """Beam whose bin b reads values[b] at pixel (b, 0)."""

    def __init__(self, values):
        self.values = list(values)

    def sample(self, bin):
        return self.values[bin]

    def position(self, bin):
        return float(bin), 0.0

    def pixel(self, bin):
        return bin, 0

@pytest.fixture
def make_sampler():
    return ListSampler

@pytest.fixture
def lead_in_50():
    return list(LEAD_IN_50)

@pytest.fixture
def vertical_beam_config():
    """One beam straight up the center column; bin b reads row rows-1-b."""
    return PeakSegConfig(n_beams=1, fov_deg=0.0, start_bin=2, sonar_vertical_position=1)

@pytest.fixture
def blob_image():
    """30x21 image, background 50, one 5x5 blob of 200 on the center column (col 10)."""
    img = np.full((30, 21), 50, dtype=np.uint16)
    img[10:15, 8:13] = 200
    return img
