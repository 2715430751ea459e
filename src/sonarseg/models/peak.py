from typing import NamedTuple

class PeakRecord(NamedTuple):
    """One closed peak run on one beam.

    threshold   : background mean at the closing bin + smallest height in the run
    row, col    : float seed position (bin of largest height), truncated when used
    peak_height : largest height in the run
    background  : background mean the heights were measured against
    """
    threshold: int
    row: float
    col: float
    beam: int = 0
    bin: int = 0
    peak_height: int = 0
    background: int = 0

    @property
    def seed(self):
        return int(self.row), int(self.col)
