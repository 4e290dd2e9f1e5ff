"""
Tests for course_export module.

Run with: pytest tests/test_course_export.py -v
"""

import json
import zipfile

import pytest
from PIL import Image

from conftest import make_hole
from course_export import export_course, hole_file_name, main, package_tee_signs
from course_model import Course
from export_config import ExportConfig, PrintConfig, TeeSignConfig


@pytest.fixture
def course():
    return Course(id="c", name="Riverside", holes=[make_hole(1), make_hole(2, tee=(0.001, 0),
                                                                            basket=(0.001, 0.001))])


@pytest.fixture
def course_file(tmp_path):
    data = {
        "id": "c1",
        "name": "Riverside",
        "holes": [{"id": "h1", "number": 1, "par": 3, "features": [
            {"id": "t1", "type": "tee", "coordinates": [0, 0], "name": "Pro"},
            {"id": "b1", "type": "basket", "coordinates": [0, 0.001]},
        ]}],
    }
    path = tmp_path / "riverside.json"
    path.write_text(json.dumps(data))
    return path


class TestExportCourse:
    """Tests for export_course."""

    def test_hole_file_name(self):
        """Test zero padded names."""
        assert hole_file_name(7) == "hole_07.svg"

    def test_course_layout(self, course, tmp_path):
        """Test a single course map file."""
        output = tmp_path / "out" / "map.svg"
        paths = export_course(course, ExportConfig(width=800, height=600), "course", output)
        assert paths == [output]
        assert output.read_text().startswith("<svg")

    def test_tee_sign_directory(self, course, tmp_path):
        """Test one SVG per hole."""
        paths = export_course(course, TeeSignConfig(), "tee-signs", tmp_path / "signs")
        assert [p.name for p in paths] == ["hole_01.svg", "hole_02.svg"]
        assert all(p.exists() for p in paths)

    def test_print_layout(self, course, tmp_path):
        """Test the overview plus one page per hole."""
        paths = export_course(course, PrintConfig(), "print", tmp_path / "booklet")
        assert [p.name for p in paths] == ["overview.svg", "hole_01.svg", "hole_02.svg"]


class TestPackageTeeSigns:
    """Tests for tee sign archives."""

    def test_archive_with_assets(self, course, tmp_path):
        """Test that signs and available assets are packaged."""
        assets = tmp_path / "assets"
        assets.mkdir()
        Image.new("RGB", (8, 8), "green").save(assets / "grass.jpg", "JPEG")
        archive_path = tmp_path / "signs.zip"

        names = package_tee_signs(course, TeeSignConfig(), archive_path, assets)
        assert names == ["hole_01.svg", "hole_02.svg", "grass.jpg"]
        with zipfile.ZipFile(archive_path) as archive:
            assert sorted(archive.namelist()) == ["grass.jpg", "hole_01.svg", "hole_02.svg"]
            sign = archive.read("hole_01.svg").decode("utf-8")
        assert 'grass.jpg"' in sign
        assert "data:image/jpeg" not in sign

    def test_archive_without_assets(self, course, tmp_path):
        """Test an archive of signs only."""
        names = package_tee_signs(course, TeeSignConfig(), tmp_path / "signs.zip")
        assert names == ["hole_01.svg", "hole_02.svg"]


class TestMain:
    """Tests for the command line entry point."""

    def test_course_export(self, course_file, tmp_path, capsys):
        """Test a successful run."""
        output = tmp_path / "map.svg"
        assert main([str(course_file), "--output", str(output)]) == 0
        assert output.exists()
        assert "Done: 1 file(s) written" in capsys.readouterr().out

    def test_default_output_name(self, course_file, tmp_path, monkeypatch):
        """Test the output name derived from the course file."""
        monkeypatch.chdir(tmp_path)
        assert main([str(course_file), "--layout", "tee-signs"]) == 0
        assert (tmp_path / "riverside_tee-signs" / "hole_01.svg").exists()

    def test_config_file(self, course_file, tmp_path):
        """Test options loaded from a JSON file."""
        config = tmp_path / "print.json"
        config.write_text(json.dumps({"includeLegend": False}))
        output = tmp_path / "booklet"
        assert main([str(course_file), "--layout", "print", "--config", str(config), "--output", str(output)]) == 0
        assert (output / "overview.svg").exists()

    def test_invalid_config(self, course_file, tmp_path, capsys):
        """Test exit code 2 on bad options."""
        config = tmp_path / "bad.json"
        config.write_text(json.dumps({"units": "yards"}))
        assert main([str(course_file), "--config", str(config)]) == 2
        assert "Error" in capsys.readouterr().out

    def test_missing_course(self, tmp_path):
        """Test exit code 2 for a missing course file."""
        assert main([str(tmp_path / "missing.json")]) == 2

    def test_unknown_layout(self, course_file):
        """Test that argparse rejects unknown layouts."""
        with pytest.raises(SystemExit):
            main([str(course_file), "--layout", "poster"])
