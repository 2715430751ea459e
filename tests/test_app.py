import numpy as np
import pytest
from PIL import Image

from sonarseg.app import load_image, main

INI = """\
[PeakSegSearch]
nBeams = 1
bearing = 0
startBin = 2
"""

@pytest.fixture
def image_path(tmp_path, blob_image):
    path = tmp_path / "fan.png"
    Image.fromarray(blob_image.astype(np.uint8)).save(path)
    return path

@pytest.fixture
def ini_path(tmp_path):
    path = tmp_path / "seg.ini"
    path.write_text(INI, encoding="utf-8")
    return path

def test_load_image_gray(image_path, blob_image):
    img = load_image(image_path)
    assert img.shape == blob_image.shape
    assert img[12, 10] == 200

def test_load_image_converts_colour(tmp_path):
    path = tmp_path / "rgb.png"
    Image.new("RGB", (4, 3), (90, 90, 90)).save(path)
    img = load_image(path)
    assert img.shape == (3, 4)
    assert img[0, 0] == 90

def test_main_prints_regions_and_writes_overlay(image_path, ini_path, tmp_path, capsys):
    overlay = tmp_path / "overlay.png"
    assert main([str(image_path), "--config", str(ini_path), "--overlay", str(overlay)]) == 0
    lines = capsys.readouterr().out.strip().splitlines()
    assert len(lines) == 1
    assert "n=25" in lines[0] and "threshold=200" in lines[0]
    assert lines[0].endswith("mean=200.0")
    assert overlay.is_file()

def test_main_missing_image(tmp_path):
    assert main([str(tmp_path / "missing.png")]) == 1

def test_main_missing_config(image_path, tmp_path):
    assert main([str(image_path), "--config", str(tmp_path / "missing.ini")]) == 1

def test_main_reports_beams_leaving_the_image(tmp_path, caplog):
    path = tmp_path / "square.png"
    Image.fromarray(np.full((60, 60), 50, dtype=np.uint8)).save(path)
    assert main([str(path)]) == 1
    assert "clipBeamsToImage" in caplog.text

    ini = tmp_path / "clip.ini"
    ini.write_text("[PeakSegSearch]\nclipBeamsToImage = true\n", encoding="utf-8")
    assert main([str(path), "--config", str(ini)]) == 0
