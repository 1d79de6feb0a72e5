import json
import pytest
import logging
import requests
from gedifinder.session import Session

logging.basicConfig(level=logging.DEBUG)

def pytest_addoption(parser):
    parser.addoption("--network", action="store_true", default=False)
    parser.addoption("--cmr_url", action="store", default=Session.CMR_URL)

def pytest_configure(config):
    config.addinivalue_line("markers", "network: test makes requests to the live CMR search endpoint")

def pytest_collection_modifyitems(config, items):
    if config.getoption("--network"):
        return
    skip_network = pytest.mark.skip(reason="requires --network")
    for item in items:
        if "network" in item.keywords:
            item.add_marker(skip_network)

#
# Fake CMR search endpoint, attached in place of a requests.Session
#
class FakeEndpoint:

    REASONS = {200: "OK", 202: "Accepted", 204: "No Content", 400: "Bad Request", 404: "Not Found", 500: "Internal Server Error", 503: "Service Unavailable"}

    def __init__(self):
        self.trust_env = False
        self.requests = []
        self.handler = lambda parm: (200, self.feed([]))

    def get(self, url, params=None, headers=None, timeout=None, verify=True):
        self.requests.append({"url": url, "params": dict(params), "headers": dict(headers), "timeout": timeout, "verify": verify})
        result = self.handler(dict(params))
        if isinstance(result, Exception):
            raise result
        status_code, body = result
        return self.response(status_code, body, url)

    def response(self, status_code, body, url):
        rsps = requests.Response()
        rsps.status_code = status_code
        rsps.reason = self.REASONS.get(status_code, "")
        rsps.url = url
        rsps.encoding = "utf-8"
        if isinstance(body, str):
            rsps._content = body.encode("utf-8")
            rsps.headers["Content-Type"] = "text/html"
        else:
            rsps._content = json.dumps(body).encode("utf-8")
            rsps.headers["Content-Type"] = "application/json"
        return rsps

    @staticmethod
    def href(i):
        return f"https://e4ftl01.cr.usgs.gov/GEDI/GEDI02_B.002/2019.04.18/GEDI02_B_2019108{i:06d}_O01959_01_T03909_02_003_01_V002.h5"

    @staticmethod
    def record(i):
        return {
            "id": f"G{1000000000 + i}-LPDAAC_ECS",
            "title": f"SC:GEDI02_B.002:{2500000000 + i}",
            "producer_granule_id": f"GEDI02_B_2019108{i:06d}_O01959_01_T03909_02_003_01_V002.h5",
            "links": [
                {"rel": "http://esipfed.org/ns/fedsearch/1.1/data#", "type": "application/x-hdfeos", "href": FakeEndpoint.href(i)},
                {"rel": "http://esipfed.org/ns/fedsearch/1.1/browse#", "href": f"https://e4ftl01.cr.usgs.gov/GEDI/browse/{i}.png"}
            ]
        }

    @staticmethod
    def feed(entries):
        return {"feed": {"updated": "2026-10-18T00:00:00.000Z", "title": "ECHO granule metadata", "entry": entries}}

    def pages(self):
        return [r["params"]["pageNum"] for r in self.requests]

    #
    # serve a result set of `total` granules split into pages
    #
    def serve_records(self, total):
        def handler(parm):
            page, size = parm["pageNum"], parm["page_size"]
            first = min(total, (page - 1) * size)
            last = min(total, page * size)
            return 200, self.feed([self.record(i) for i in range(first, last)])
        self.handler = handler

    #
    # serve each result in turn, one per request
    #
    def serve_sequence(self, results):
        results = list(results)
        self.handler = lambda parm: results.pop(0)

@pytest.fixture
def endpoint():
    return FakeEndpoint()

@pytest.fixture
def session(endpoint):
    s = Session(retry_backoff=0)
    s.session = endpoint
    return s

@pytest.fixture(scope='session')
def cmr_url(request):
    return request.config.option.cmr_url
