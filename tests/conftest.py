"""Shared pytest fixtures."""

from unittest.mock import Mock

import pytest
import requests

from sensu_exporter.client import SensuClient
from sensu_exporter.models import Check, CheckResult


@pytest.fixture
def results_payload():
    """A /results body as the Sensu API returns it."""
    return [
        {
            "client": "node1",
            "check": {
                "name": "disk",
                "status": 0,
                "output": "DISK OK: 41% used",
                "duration": 0.012,
                "executed": 1500000000,
                "issued": 1500000000,
                "interval": 60,
                "subscribers": ["base"],
            },
        },
        {
            "client": "node2",
            "check": {"name": "load", "status": 2, "output": "CRITICAL: load 12.5"},
        },
    ]


@pytest.fixture
def sample_results():
    return [
        CheckResult(client="node1", check=Check(name="disk", status=0, output="ok")),
        CheckResult(client="node1", check=Check(name="memory", status=1, output="85% used")),
        CheckResult(client="node2", check=Check(name="load", status=2, output="load 12.5")),
    ]


def make_response(status_code=200, json_body=None, text=""):
    resp = Mock()
    resp.status_code = status_code
    resp.text = text
    if isinstance(json_body, Exception):
        resp.json.side_effect = json_body
    else:
        resp.json.return_value = json_body
    return resp


@pytest.fixture
def session():
    return Mock(spec=requests.Session)


@pytest.fixture
def client(session):
    return SensuClient("http://sensu.example:4567", timeout=2.5, session=session)


@pytest.fixture
def upstream(sample_results):
    """Stand-in for SensuClient returning sample_results."""
    fake = Mock(spec=SensuClient)
    fake.results_url = "http://sensu.example:4567/results"
    fake.fetch_results.return_value = sample_results
    return fake
