import numpy as np

from sonarseg.regions.extractor import RegionExtractor
from sonarseg.regions.segment import SegmentPool

def _grow(image, threshold, row, col, fragment_distance=0, pool=None):
    if pool is None:
        pool = SegmentPool()
        pool.reset_mask(*image.shape)
    ext = RegionExtractor(fragment_distance)
    ext.set_threshold(threshold)
    return ext.create_segment(pool.segment(0), image, row, col), pool

def test_grows_eight_connected_component():
    img = np.zeros((6, 6), dtype=np.uint16)
    img[1, 1] = img[2, 2] = img[3, 3] = 100  # diagonal chain
    img[1, 4] = 100                            # unconnected
    seg, pool = _grow(img, 100, 1, 1)
    assert sorted(seg.pixels) == [(1, 1), (2, 2), (3, 3)]
    assert seg.n == 3
    assert not pool.mask[1, 4]
    assert pool.mask[2, 2]

def test_pixel_at_threshold_is_accepted():
    img = np.array([[99, 100, 101]], dtype=np.uint16)
    seg, _ = _grow(img, 100, 0, 2)
    assert sorted(seg.pixels) == [(0, 1), (0, 2)]

def test_visited_pixels_are_unavailable():
    img = np.full((3, 5), 200, dtype=np.uint16)
    pool = SegmentPool()
    pool.reset_mask(3, 5)
    pool.mask[:, 2] = True
    seg, _ = _grow(img, 100, 1, 0, pool=pool)
    assert seg.n == 6
    assert all(c < 2 for _, c in seg.pixels)

def test_visited_seed_gives_empty_segment():
    img = np.full((3, 3), 200, dtype=np.uint16)
    pool = SegmentPool()
    pool.reset_mask(3, 3)
    pool.mask[1, 1] = True
    seg, _ = _grow(img, 100, 1, 1, pool=pool)
    assert seg.n == 0
    assert seg.bounding_box() is None

def test_seed_outside_image_gives_empty_segment():
    img = np.full((3, 3), 200, dtype=np.uint16)
    seg, _ = _grow(img, 100, 5, 1)
    assert seg.n == 0

def test_fragment_distance_bridges_dark_gap():
    img = np.zeros((5, 9), dtype=np.uint16)
    img[1:4, 1:4] = 150
    img[1:4, 5:8] = 150  # one dark column (col 4) between the blobs

    seg, _ = _grow(img, 150, 2, 2, fragment_distance=0)
    assert seg.n == 9

    # gaps of 1 px are bridged and a 1 px halo is added around the cores
    seg, _ = _grow(img, 150, 2, 2, fragment_distance=2)
    assert (2, 6) in seg.pixels
    assert seg.n == 5 * 9
    assert seg.bounding_box() == (0, 0, 4, 8)

def test_fragment_distance_limits_halo_width():
    img = np.zeros((11, 11), dtype=np.uint16)
    img[5, 5] = 100
    seg, _ = _grow(img, 100, 5, 5, fragment_distance=3)
    # halo reaches 2 px (gaps 1 and 2) around the single core pixel
    assert seg.bounding_box() == (3, 3, 7, 7)
    assert seg.n == 25

def test_segment_records_threshold_seed_and_mean():
    img = np.zeros((4, 4), dtype=np.uint16)
    img[0:2, 0:2] = [[100, 120], [140, 160]]
    seg, _ = _grow(img, 100, 1, 1)
    assert seg.threshold == 100
    assert seg.seed == (1, 1)
    assert seg.mean_intensity(img) == 130.0
