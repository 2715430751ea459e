import numpy as np

class OutOfBoundsError(IndexError):
    """A beam sample fell outside the image."""

    def __init__(self, angle_rad, bin, row, col, shape):
        self.angle_rad = angle_rad
        self.bin = bin
        self.row = row
        self.col = col
        self.shape = shape
        super().__init__(
            f"beam {np.degrees(angle_rad):.2f} deg, bin {bin}: pixel ({row:.2f}, {col:.2f}) "
            f"outside image of shape {tuple(shape)}")

def beam_direction(angle_rad):
    """Unit step (dx, dy) along a beam; angle 0 points straight up the image."""
    return -np.sin(angle_rad), -np.cos(angle_rad)

class BeamSampler:
    """Reads image intensities along one beam.

    Bin b sits at origin + b * direction, where origin is the apex moved
    `start_bin` steps outward. Coordinates are truncated to pixels.
    """

    def __init__(self, image, angle_rad, start_bin, apex):
        self.image = image
        self.angle_rad = float(angle_rad)
        self.dx, self.dy = beam_direction(self.angle_rad)
        ax, ay = apex
        self.x0 = ax + start_bin * self.dx
        self.y0 = ay + start_bin * self.dy

    @classmethod
    def for_beam(cls, image, fan, beam):
        return cls(image, fan.beam_angle(beam), fan.start_bin, fan.apex)

    def position(self, bin):
        """Float (row, col) of a bin."""
        return self.y0 + bin * self.dy, self.x0 + bin * self.dx

    def inside(self, bin):
        rows, cols = self.image.shape[:2]
        row, col = self.position(bin)
        r, c = int(row), int(col)
        return 0 <= r < rows and 0 <= c < cols

    def pixel(self, bin):
        row, col = self.position(bin)
        if not self.inside(bin):
            raise OutOfBoundsError(self.angle_rad, bin, row, col, self.image.shape)
        return int(row), int(col)

    def sample(self, bin):
        return int(self.image[self.pixel(bin)])

    def bins_inside(self, num_bins):
        """Number of leading bins (out of num_bins) that stay in the image."""
        for b in range(num_bins):
            if not self.inside(b):
                return b
        return num_bins
