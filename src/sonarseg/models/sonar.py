import numpy as np

class SonarFan:
    """Beam layout of a Cartesian sonar fan with its apex below the bottom-center pixel."""

    def __init__(self, num_beams, fov_deg, start_bin, rows, cols, vertical_position=1):
        self.num_beams=int(num_beams); self.fov_deg=float(fov_deg)
        self.start_bin=int(start_bin)
        self.rows=int(rows); self.cols=int(cols)
        self.vertical_position=int(vertical_position)

    @classmethod
    def from_config(cls, cfg, shape):
        rows, cols = shape[:2]
        return cls(cfg.n_beams, cfg.fov_deg, cfg.start_bin, rows, cols,
                   vertical_position=cfg.sonar_vertical_position)

    @property
    def num_bins(self):
        return self.rows - self.start_bin

    @property
    def apex(self):
        """(x, y) = (column, row) of the sonar head."""
        return self.cols / 2.0, float(self.rows + self.vertical_position)

    @property
    def increment_rad(self):
        fov = np.deg2rad(self.fov_deg)
        if self.num_beams > 1:
            return fov / (self.num_beams - 1)
        return 2 * fov  # single beam, increment is never used

    def beam_angle(self, beam):
        return -np.deg2rad(self.fov_deg) / 2.0 + beam * self.increment_rad
