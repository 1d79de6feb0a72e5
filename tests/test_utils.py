"""Tests for the granule list command line utility."""

import os
import runpy
import pytest
import requests
from pathlib import Path
import gedifinder

# Set test directory
TESTDIR = Path(__file__).parent
SCRIPT = TESTDIR.parent / "utils" / "gedi_granule_list.py"

@pytest.fixture
def cli(endpoint, monkeypatch):
    monkeypatch.setattr(requests, "Session", lambda: endpoint)
    yield runpy.run_path(str(SCRIPT))["main"]
    gedifinder.init()

class TestGranuleListUtility:
    def test_bbox(self, cli, endpoint, tmp_path, capsys):
        endpoint.serve_records(3)
        output = tmp_path / "granules.txt"
        assert cli(["--product", "GEDI02_B.002", "--bbox=-73.65,-12.64,-47.81,9.7", "--output", str(output)]) == 0
        assert output.read_text(encoding="utf-8").splitlines() == [endpoint.href(i) for i in range(3)]
        assert endpoint.requests[0]["params"]["bounding_box"] == "-73.65,-12.64,-47.81,9.7"
        assert "Found 3 GEDI02_B.002 granules" in capsys.readouterr().out

    def test_roi(self, cli, endpoint, tmp_path):
        endpoint.serve_records(2)
        assert cli(["-p", "GEDI01_B.002", "--roi", os.path.join(TESTDIR, "data", "roi.geojson"), "--dir", str(tmp_path)]) == 0
        files = os.listdir(tmp_path)
        assert len(files) == 1
        assert files[0].startswith("GEDI01_B_002_GranuleList_")
        assert endpoint.requests[0]["params"]["concept_id"] == "C1908344278-LPDAAC_ECS"

    def test_remote_error(self, cli, endpoint, tmp_path, capsys):
        endpoint.handler = lambda parm: (404, {"errors": ["concept_id not found"]})
        assert cli(["-p", "GEDI02_A.002", "--bbox=-73.65,-12.64,-47.81,9.7", "--dir", str(tmp_path)]) == 1
        assert "concept_id not found" in capsys.readouterr().err
        assert os.listdir(tmp_path) == []

    def test_unknown_product(self, cli):
        with pytest.raises(SystemExit):
            cli(["-p", "GEDI04_A.002", "--bbox=-73.65,-12.64,-47.81,9.7"])

    def test_region_required(self, cli):
        with pytest.raises(SystemExit):
            cli(["-p", "GEDI02_A.002"])
