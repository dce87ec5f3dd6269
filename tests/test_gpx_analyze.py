import pytest

import spurilo.analyze.gpx_analyze as ga
from spurilo.config import GeocodeSettings, SpuriloConfig


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch):
    monkeypatch.setattr(ga, "load_config", lambda: SpuriloConfig(geocode=GeocodeSettings(enabled=False)))


def test_report(sample_gpx_path, capsys):
    assert ga.main([str(sample_gpx_path)]) == 0
    out = capsys.readouterr().out
    assert "Morning ride" in out
    assert "Loop above the lake" in out
    assert "2024-05-01T08:00:00+00:00" in out
    assert "333m" in out
    assert "Uphill          20m" in out
    assert "Downhill        5m" in out
    assert "Location" not in out


def test_verbose_report(sample_gpx_path, capsys):
    assert ga.main(["--verbose", str(sample_gpx_path)]) == 0
    out = capsys.readouterr().out
    assert "Simpl. uphill" in out
    assert "Profile points" in out


def test_tsv(sample_gpx_path, capsys):
    assert ga.main(["--tsv", str(sample_gpx_path), str(sample_gpx_path)]) == 0
    lines = capsys.readouterr().out.strip().splitlines()
    assert lines[0] == ga.TSV_HEADER
    assert len(lines) == 3
    fields = lines[1].split("\t")
    assert fields[1] == "Morning ride"
    assert float(fields[5]) == pytest.approx(20.0)


def test_draw(sample_gpx_path, tmp_path, capsys):
    out = tmp_path / "ride.png"
    assert ga.main(["--draw", "--output", str(out), str(sample_gpx_path)]) == 0
    assert out.exists()


def test_draw_failure_is_only_a_warning(sample_gpx_path, tmp_path, capsys):
    out = tmp_path / "missing" / "ride.png"
    assert ga.main(["--draw", "--raw-profile", "--output", str(out), str(sample_gpx_path)]) == 0
    captured = capsys.readouterr()
    assert "Distance" in captured.out
    assert "Warning:" in captured.err


def test_default_image_path(sample_gpx_path, tmp_path):
    cfg = SpuriloConfig()
    assert ga.image_path_for(sample_gpx_path, cfg, None) == sample_gpx_path.parent / "sample-profile.png"
    assert ga.image_path_for(sample_gpx_path, cfg, str(tmp_path / "x.png")) == tmp_path / "x.png"


def test_cli_overrides(sample_gpx_path, capsys):
    assert ga.main(["--elevation-threshold", "100", "--distance-threshold", "1000",
                    "--tsv", str(sample_gpx_path)]) == 0
    fields = capsys.readouterr().out.strip().splitlines()[1].split("\t")
    # everything but the first waypoint of each segment is noise now
    assert float(fields[4]) == 0.0
    assert float(fields[5]) == 0.0


def test_invalid_threshold_is_rejected(sample_gpx_path, capsys):
    assert ga.main(["--distance-threshold", "-1", str(sample_gpx_path)]) == 2
    assert "error:" in capsys.readouterr().err


def test_output_needs_single_file(sample_gpx_path, capsys):
    assert ga.main(["--output", "x.png", str(sample_gpx_path), str(sample_gpx_path)]) == 2


def test_bad_files_are_skipped(sample_gpx_path, tmp_path, capsys):
    broken = tmp_path / "broken.gpx"
    broken.write_text("<gpx>", encoding="utf-8")
    empty = tmp_path / "empty.gpx"
    empty.write_text('<gpx xmlns="http://www.topografix.com/GPX/1/1"/>', encoding="utf-8")
    rc = ga.main([str(broken), str(empty), str(tmp_path / "nope.gpx"), str(sample_gpx_path)])
    assert rc == 1
    captured = capsys.readouterr()
    assert "Morning ride" in captured.out
    assert captured.err.count("error:") == 2
    assert "Skipping (not a file)" in captured.err
