import matplotlib.image as mpimg
import pytest

from spurilo.analyze.profile import ElevationSample as S
from spurilo.config import RenderSettings
from spurilo.errors import RenderError
from spurilo.visualize.plot import canvas_size, draw_profile, profile_to_canvas

PROFILE = [S(0, 10), S(300, 60), S(600, 20)]


def test_profile_to_canvas():
    segs = profile_to_canvas(PROFILE, scale_ratio=3.0, height=100)
    assert segs == [((0.0, 90.0), (100.0, 40.0)), ((100.0, 40.0), (200.0, 80.0))]


def test_profile_to_canvas_short_profiles():
    assert profile_to_canvas([], 3.0, 100) == []
    assert profile_to_canvas([S(0, 1)], 3.0, 100) == []


def test_canvas_size():
    assert canvas_size(600, RenderSettings()) == (200, 1000)
    assert canvas_size(0, RenderSettings(height_px=50)) == (1, 50)


def test_draw_profile_writes_png(tmp_path):
    out = tmp_path / "profile.png"
    assert draw_profile(PROFILE, 600, out, RenderSettings(height_px=100)) == out
    assert out.read_bytes()[:8] == b"\x89PNG\r\n\x1a\n"
    img = mpimg.imread(out)
    assert img.shape[:2] == (100, 200)


def test_draw_empty_profile(tmp_path):
    out = tmp_path / "empty.png"
    draw_profile([], 0, out, RenderSettings(height_px=20))
    assert out.exists()


def test_unwritable_destination_is_a_render_error(tmp_path):
    with pytest.raises(RenderError):
        draw_profile(PROFILE, 600, tmp_path / "missing" / "profile.png", RenderSettings(height_px=100))
