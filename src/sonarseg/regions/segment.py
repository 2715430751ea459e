import numpy as np

class Segment:
    """Reusable region handle bound to its pool's visited mask."""

    def __init__(self, pool):
        self._pool = pool
        self.pixels = []
        self.threshold = None
        self.seed = None

    @property
    def mask(self):
        return self._pool.mask

    @property
    def n(self):
        return len(self.pixels)

    def clear(self):
        self.pixels = []
        self.threshold = None
        self.seed = None

    def add(self, row, col):
        self.mask[row, col] = True
        self.pixels.append((row, col))

    def rows_cols(self):
        if not self.pixels:
            return np.empty(0, np.int64), np.empty(0, np.int64)
        rc = np.asarray(self.pixels, dtype=np.int64)
        return rc[:, 0], rc[:, 1]

    def bounding_box(self):
        """(row_min, col_min, row_max, col_max), or None when empty."""
        if not self.pixels:
            return None
        rr, cc = self.rows_cols()
        return int(rr.min()), int(cc.min()), int(rr.max()), int(cc.max())

    def mean_intensity(self, image):
        if not self.pixels:
            return 0.0
        rr, cc = self.rows_cols()
        return float(np.mean(image[rr, cc]))

class SegmentPool:
    """Visited mask shared by every region of one image, plus pooled handles."""

    def __init__(self):
        self.mask = np.zeros((0, 0), dtype=bool)
        self._segments = []

    def reset_mask(self, rows, cols):
        if self.mask.shape != (rows, cols):
            self.mask = np.zeros((rows, cols), dtype=bool)
        else:
            self.mask[:] = False

    def segment(self, index):
        while len(self._segments) <= index:
            self._segments.append(Segment(self))
        seg = self._segments[index]
        seg.clear()
        return seg
