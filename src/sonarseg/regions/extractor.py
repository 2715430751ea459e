import heapq

NEIGHBORS_8 = ((-1, -1), (-1, 0), (-1, 1),
               (0, -1),           (0, 1),
               (1, -1),  (1, 0),  (1, 1))

class RegionExtractor:
    """
    8-connected region growth from a seed pixel.

    A pixel joins when its intensity reaches the threshold (>=, not strictly
    above: the threshold is the intensity of the weakest bin of the peak run,
    so a one-bin run must still grow its own seed), or when it lies
    fewer than `fragment_distance` below-threshold steps away from the grown
    region. The second rule bridges small dark gaps (noise, acoustic shadow)
    so one object is not split in several regions. Pixels already set in the
    segment's visited mask never join.
    """

    def __init__(self, fragment_distance=0, threshold=0):
        self.fragment_distance = int(fragment_distance)
        self.threshold = threshold

    @classmethod
    def from_config(cls, cfg):
        return cls(cfg.fragment_distance)

    def set_threshold(self, value):
        self.threshold = value

    def create_segment(self, seg, image, row, col):
        seg.clear()
        seg.threshold = self.threshold
        seg.seed = (row, col)

        mask = seg.mask
        rows, cols = image.shape[:2]
        if not (0 <= row < rows and 0 <= col < cols):
            return seg
        if mask[row, col] or image[row, col] < self.threshold:
            return seg

        # Lowest gap first, so every pixel is reached by its shortest gap.
        heap = [(0, row, col)]
        while heap:
            gap, r, c = heapq.heappop(heap)
            if mask[r, c]:
                continue
            seg.add(r, c)
            for dr, dc in NEIGHBORS_8:
                nr, nc = r + dr, c + dc
                if nr < 0 or nr >= rows or nc < 0 or nc >= cols or mask[nr, nc]:
                    continue
                if image[nr, nc] >= self.threshold:
                    heapq.heappush(heap, (0, nr, nc))
                elif gap + 1 < self.fragment_distance:
                    heapq.heappush(heap, (gap + 1, nr, nc))
        return seg
