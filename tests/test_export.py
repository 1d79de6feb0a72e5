"""Tests for writing granule lists."""

import os
import pytest
from datetime import datetime
import gedifinder
from gedifinder import export

URLS = [
    "https://e4ftl01.cr.usgs.gov/GEDI/GEDI02_B.002/2019.04.18/GEDI02_B_2019108002012_O01959_01_T03909_02_003_01_V002.h5",
    "https://e4ftl01.cr.usgs.gov/GEDI/GEDI02_B.002/2019.04.18/GEDI02_B_2019108015253_O01960_01_T03910_02_003_01_V002.h5",
    "https://e4ftl01.cr.usgs.gov/GEDI/GEDI02_B.002/2019.04.19/GEDI02_B_2019109002749_O01975_04_T00601_02_003_01_V002.h5"
]

class TestExport:
    def test_name(self):
        name = export.granule_list_name("GEDI02_B.002", timestamp=datetime(2026, 1, 5, 14, 30, 0))
        assert name == "GEDI02_B_002_GranuleList_20260105143000.txt"

    def test_default_name(self):
        name = export.granule_list_name("GEDI01_B.002")
        assert name.startswith("GEDI01_B_002_GranuleList_")
        assert len(name) == len("GEDI01_B_002_GranuleList_") + 14 + len(".txt")

    def test_write(self, tmp_path):
        count, path = export.export(URLS, product="GEDI02_B.002", directory=str(tmp_path))
        assert count == 3
        assert os.path.dirname(path) == str(tmp_path)
        assert os.path.basename(path).startswith("GEDI02_B_002_GranuleList_")
        with open(path, mode='rt', encoding='utf-8') as file:
            assert file.read() == "\n".join(URLS) + "\n"

    def test_path(self, tmp_path):
        count, path = export.export(URLS[:1], path=str(tmp_path / "granules.txt"))
        assert count == 1
        assert path == str(tmp_path / "granules.txt")
        assert (tmp_path / "granules.txt").read_text(encoding="utf-8").splitlines() == URLS[:1]

    def test_current_directory(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        count, path = export.export(URLS, product="GEDI02_A.002")
        assert count == 3
        assert os.path.realpath(os.path.dirname(path)) == os.path.realpath(str(tmp_path))

    def test_empty(self, tmp_path):
        count, path = export.export([], path=str(tmp_path / "empty.txt"))
        assert count == 0
        assert (tmp_path / "empty.txt").read_text(encoding="utf-8") == ""

    def test_generator(self, tmp_path):
        count, _ = export.export((url for url in URLS), path=str(tmp_path / "granules.txt"))
        assert count == 3

    def test_no_destination(self):
        with pytest.raises(gedifinder.FatalError):
            export.export(URLS)

    def test_reported(self, tmp_path, caplog):
        _, path = export.export(URLS, product="GEDI02_B.002", directory=str(tmp_path))
        assert f"3 intersecting GEDI02_B.002 granules has been saved to: {path}" in caplog.text
