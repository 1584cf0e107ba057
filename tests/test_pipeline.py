import json
import logging

import pytest

SCENARIO = b'{"vdl2":{"avlc":{"src":{"addr":"A12345"}},"t":{"sec":1700000000}}}'


def _log_lines(writer):
    return [json.loads(line) for line in writer.current_path.read_text(encoding="utf-8").splitlines()]


def test_end_to_end_enrichment(pipeline, writer):
    message = pipeline.handle_datagram(SCENARIO)

    assert message["db"]["reg"] == "N123"
    assert message["db"]["ownop"] == "Acme Air"
    assert message["timestamp_iso"] == "2023-11-14T22:13:20.000Z"
    assert message["vdl2"]["avlc"]["src"]["addr"] == "A12345"

    [logged] = _log_lines(writer)
    assert logged == message

    summary = pipeline.stats.summary()
    assert summary.total_packets == 1
    assert summary.unique_aircraft == 1
    assert ("Acme Air", 1) in summary.top_owners
    assert ("B738", 1) in summary.top_models


def test_unknown_address_gets_empty_enrichment(pipeline, tmp_path):
    datagram = b'{"vdl2":{"avlc":{"src":{"addr":"BEEF01"}}}}'
    for _ in range(3):
        message = pipeline.handle_datagram(datagram)

    assert message["db"] == {
        "reg": "",
        "icaotype": "",
        "year": "",
        "manufacturer": "",
        "model": "",
        "ownop": "",
        "short_type": "",
        "mil": False,
        "faa_pia": False,
        "faa_ladd": False,
    }
    ledger = (tmp_path / "unknown" / "unknown_hex_2024-03-10.log").read_text(encoding="utf-8")
    assert ledger.count("beef01") == 1
    assert pipeline.stats.summary().top_owners == [("Unknown", 3)]


def test_missing_event_time_uses_receive_time(pipeline):
    message = pipeline.handle_datagram(b'{"vdl2":{"avlc":{}}}')

    assert message["timestamp_iso"] == "2024-03-10T12:30:15.000Z"


def test_packet_without_address_skips_lookup(pipeline, lookup, monkeypatch):
    def fail(key):
        raise AssertionError("lookup should not be called")

    monkeypatch.setattr(lookup, "lookup", fail)

    message = pipeline.handle_datagram(b'{"vdl2":{"freq":136975000}}')

    assert message["db"]["reg"] == ""
    assert message["vdl2"]["freq"] == 136975000
    assert pipeline.stats.summary().unique_aircraft == 0


@pytest.mark.parametrize(
    "datagram",
    [
        b"not json",
        b'{"vdl2": ',
        b"\xff\xfe",
        b"[1, 2, 3]",
        b"42",
        b'{"vdl2":{"avlc":{"src":{"addr":"A12345"}}},"lvl":NaN}',
        b'{"x": -Infinity}',
    ],
)
def test_malformed_datagrams_are_dropped(pipeline, writer, caplog, datagram):
    with caplog.at_level(logging.ERROR, logger="vdl2feed.pipeline"):
        assert pipeline.handle_datagram(datagram) is None

    assert "Invalid JSON" in caplog.text
    assert writer.current_path.read_text(encoding="utf-8") == ""
    assert pipeline.stats.summary().total_packets == 0


def test_log_failure_does_not_stop_stats_or_publish(pipeline, writer, monkeypatch):
    published = []
    monkeypatch.setattr(pipeline.broadcaster, "publish", published.append)
    writer.current_path.unlink()
    writer.current_path.mkdir()

    message = pipeline.handle_datagram(SCENARIO)

    assert message is not None
    assert pipeline.stats.summary().total_packets == 1
    assert published == [message]


def test_extra_fields_pass_through(pipeline):
    datagram = {
        "vdl2": {
            "avlc": {"src": {"addr": "AE1234"}, "acars": {"flight": "RCH123", "msg_text": "HELLO"}},
            "station": "KSEA",
        }
    }

    message = pipeline.handle_datagram(json.dumps(datagram).encode())

    assert message["vdl2"]["station"] == "KSEA"
    assert message["vdl2"]["avlc"]["acars"]["msg_text"] == "HELLO"
    assert message["db"]["mil"] is True
    assert pipeline.stats.summary().unique_flights == 1
