from __future__ import annotations

import json
import subprocess
import sys
from pathlib import Path

import numpy as np
from PIL import Image

REPO_ROOT = Path(__file__).resolve().parents[2]


def _run(*args):
    return subprocess.run(
        [sys.executable, "-m", "studio.main", *args],
        cwd=REPO_ROOT,
        check=True,
        capture_output=True,
        text=True,
    )


def test_cli_extract_json_smoke(tmp_path):
    image = np.zeros((60, 80, 3), dtype=np.uint8)
    image[:, :40] = [30, 120, 210]
    image[:, 40:] = [200, 60, 20]
    image_path = tmp_path / "cli.png"
    Image.fromarray(image).save(image_path)

    out_path = tmp_path / "colors.json"
    completed = _run("extract", "--image", str(image_path), "--out", str(out_path))

    assert completed.returncode == 0
    payload = json.loads(out_path.read_text(encoding="utf-8"))
    assert payload["palette"] == []
    assert sorted(c["hex"] for c in payload["dominant_colors"]) == ["#1E78D2", "#C83C14"]


def test_cli_extract_css_to_stdout(tmp_path):
    image_path = tmp_path / "solid.png"
    Image.new("RGB", (20, 20), (90, 160, 90)).save(image_path)

    completed = _run("extract", "--image", str(image_path), "--format", "css")

    assert "--dominant-1: #5AA05A;" in completed.stdout


def test_cli_mask_export(tmp_path):
    surface = np.zeros((40, 50, 4), dtype=np.uint8)
    surface[10:20, 10:30] = [0, 235, 2, 89]
    surface_path = tmp_path / "paint.png"
    Image.fromarray(surface).save(surface_path)

    mask_path = tmp_path / "mask.png"
    _run("mask", "--surface", str(surface_path), "--width", "100", "--height", "80",
         "--out", str(mask_path))

    with Image.open(mask_path) as mask:
        assert mask.size == (100, 80)
        gray = np.asarray(mask.convert("L"))
    assert gray[30, 40] == 255
    assert gray[70, 90] == 0


def test_cli_reports_load_errors(tmp_path):
    completed = subprocess.run(
        [sys.executable, "-m", "studio.main", "extract", "--image", str(tmp_path / "nope.png")],
        cwd=REPO_ROOT,
        capture_output=True,
        text=True,
    )

    assert completed.returncode == 1
    assert "error:" in completed.stderr


def test_cli_rejects_zero_count(tmp_path):
    image_path = tmp_path / "solid.png"
    Image.new("RGB", (20, 20), (90, 160, 90)).save(image_path)

    completed = subprocess.run(
        [sys.executable, "-m", "studio.main", "extract", "--image", str(image_path),
         "--count", "0"],
        cwd=REPO_ROOT,
        capture_output=True,
        text=True,
    )

    assert completed.returncode == 1
    assert "count must be at least 1" in completed.stderr
