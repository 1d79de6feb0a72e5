"""Tests against the live CMR search endpoint (run with --network)."""

import pytest
import gedifinder

# Grand Mesa, Colorado
GRANDMESA = "-108.3605610678553,38.89102961045247,-107.7677425431139,39.26613714985466"

@pytest.mark.network
class TestCMR:
    @pytest.mark.parametrize("product", ["GEDI01_B.002", "GEDI02_A.002", "GEDI02_B.002"])
    def test_grandmesa(self, cmr_url, product):
        session = gedifinder.Session(url=cmr_url, rethrow=True)
        granules = gedifinder.gedi_finder(product, GRANDMESA, session=session)
        assert len(granules) >= 100
        assert all(url.endswith(".h5") for url in granules)
        assert product.split(".")[0] in granules[0]

    def test_invalid_bbox(self, cmr_url):
        session = gedifinder.Session(url=cmr_url)
        with pytest.raises(gedifinder.RemoteQueryError) as info:
            gedifinder.gedi_finder("GEDI02_B.002", "-108.36,38.89,-107.76", rethrow=True, session=session)
        assert info.value.status_code == 400
        assert len(info.value.errors) > 0
