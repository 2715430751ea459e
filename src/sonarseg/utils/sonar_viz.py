import numpy as np
from PIL import Image, ImageDraw
from matplotlib.figure import Figure
from matplotlib.backends.backend_agg import FigureCanvasAgg

# RGB, cycled by region / peak index
PALETTE = [
    (255, 0, 0), (0, 200, 0), (0, 0, 255), (255, 200, 0), (255, 0, 255),
    (0, 220, 220), (255, 128, 0), (128, 0, 255), (0, 128, 255), (160, 255, 60),
]

def color(i):
    return PALETTE[i % len(PALETTE)]

def to_8bit(image):
    """Saturating cast to uint8 (values above 255 become 255)."""
    return np.clip(np.asarray(image), 0, 255).astype(np.uint8)

def to_rgb(image):
    g = to_8bit(image)
    return np.repeat(g[:, :, None], 3, axis=2)

def paint_pixels(img, pixels, rgb):
    if not pixels:
        return img
    rc = np.asarray(pixels, dtype=np.int64)
    img[rc[:, 0], rc[:, 1], :] = np.array(rgb, dtype=np.uint8)
    return img

def render_overlay(image, segments):
    """Gray image with each kept region painted in its palette color."""
    img = to_rgb(image)
    for i, seg in enumerate(segments):
        paint_pixels(img, seg.pixels, color(i))
    return img

def render_calibration_mask(image, result, seed_radius=7):
    """
    Annotated image of one calibration run:
      - the scanned beam path in the first palette color
      - every grown region in its peak color
      - a filled circle with black outline on each seed
    """
    img = to_rgb(image)
    paint_pixels(img, result.trace.pixels, color(0))
    for idx, peak, pixels in result.regions:
        paint_pixels(img, pixels, color(idx))

    pil = Image.fromarray(img)
    draw = ImageDraw.Draw(pil)
    for idx, peak, _ in result.regions:
        x, y = peak.col, peak.row
        box = (x - seed_radius, y - seed_radius, x + seed_radius, y + seed_radius)
        draw.ellipse(box, fill=color(idx), outline=(0, 0, 0))
    return np.array(pil, dtype=np.uint8)

def plot_beam_trace(ax, trace):
    """Raw intensity (blue), background mean (red), acceptance line (green), peaks (circles)."""
    bins = trace.bins
    ax.plot(bins, trace.intensity, color=(0, 0, 1), linewidth=1, label="intensity")
    ax.plot(bins, trace.mean, color=(1, 0, 0), linewidth=1, label="background mean")
    ax.plot(bins, trace.accept, color=(0, 0.8, 0), linewidth=1, label="mean + Hmin")
    for i, p in enumerate(trace.peaks):
        rgb = tuple(v / 255.0 for v in color(i))
        ax.scatter([p.bin], [p.background + p.peak_height], s=60,
                   color=rgb, edgecolors="k", linewidths=1, zorder=3)
    ax.set_xlabel("bin")
    ax.set_ylabel("intensity")
    ax.legend(loc="upper right", fontsize=8)

def render_beam_chart(trace, size=(640, 360), dpi=100):
    fig = Figure(figsize=(size[0] / dpi, size[1] / dpi), dpi=dpi, facecolor="white")
    canvas = FigureCanvasAgg(fig)
    ax = fig.add_subplot(111)
    plot_beam_trace(ax, trace)
    fig.tight_layout()
    canvas.draw()
    return np.asarray(canvas.buffer_rgba())[:, :, :3].copy()

def save_png(img, path):
    Image.fromarray(np.asarray(img, dtype=np.uint8)).save(str(path))
    return path
