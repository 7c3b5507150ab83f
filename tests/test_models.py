"""Tests for decoding of the /results payload."""

import pytest

from sensu_exporter.models import Check, CheckResult, DecodeError, decode_results


def test_decode_full_result(results_payload):
    results = decode_results(results_payload)

    assert len(results) == 2
    first = results[0]
    assert first.client == "node1"
    assert first.check == Check(
        name="disk",
        status=0,
        output="DISK OK: 41% used",
        duration=0.012,
        executed=1500000000,
        issued=1500000000,
        interval=60,
        subscribers=("base",),
    )


def test_decode_preserves_order(results_payload):
    results = decode_results(results_payload)
    assert [r.client for r in results] == ["node1", "node2"]


def test_decode_empty_array():
    assert decode_results([]) == []


def test_decode_keys_are_case_insensitive():
    results = decode_results([{"Client": "node1", "Check": {"Name": "disk", "Status": 2}}])

    assert results == [CheckResult(client="node1", check=Check(name="disk", status=2))]


def test_decode_missing_fields_take_zero_values():
    results = decode_results([{"client": "node1"}, {"check": {"name": "disk", "status": None}}])

    assert results[0] == CheckResult(client="node1", check=Check())
    assert results[1].client == ""
    assert results[1].check.status == 0
    assert results[1].check.subscribers == ()


@pytest.mark.parametrize("payload", [{}, "results", 42, None])
def test_decode_rejects_non_array(payload):
    with pytest.raises(DecodeError, match="expected JSON array"):
        decode_results(payload)


@pytest.mark.parametrize(
    "element",
    [
        "node1",
        {"client": 1},
        {"client": "node1", "check": []},
        {"client": "node1", "check": {"status": "critical"}},
        {"client": "node1", "check": {"status": 1.5}},
        {"client": "node1", "check": {"status": True}},
        {"client": "node1", "check": {"duration": "fast"}},
        {"client": "node1", "check": {"subscribers": "base"}},
        {"client": "node1", "check": {"subscribers": ["base", 3]}},
    ],
)
def test_decode_rejects_wrong_types(element):
    with pytest.raises(DecodeError, match=r"results\[1\]"):
        decode_results([{"client": "ok"}, element])


def test_results_are_immutable():
    result = CheckResult(client="node1", check=Check(name="disk"))
    with pytest.raises(AttributeError):
        result.client = "node2"
