import logging
from datetime import date

import pytest
from sqlalchemy.exc import OperationalError

from vdl2feed.db import ReferenceStoreError, build_engine, open_reference_store
from vdl2feed.services.reference_lookup import ReferenceLookup


def test_lookup_returns_reference_record(lookup):
    record = lookup.lookup("a12345")

    assert record is not None
    assert record.reg == "N123"
    assert record.icaotype == "B738"
    assert record.ownop == "Acme Air"
    assert record.mil is False


def test_lookup_converts_flags_and_nulls(lookup):
    record = lookup.lookup("ae1234")

    assert record.mil is True
    assert record.faa_pia is False
    assert record.faa_ladd is True
    assert record.year == "1988"
    assert record.model == "Hercules"


def test_unknown_key_logged_once_per_process(lookup, ledger, tmp_path):
    for _ in range(5):
        assert lookup.lookup("bbbbbb") is None

    ledger_file = tmp_path / "unknown" / "unknown_hex_2024-03-10.log"
    lines = ledger_file.read_text(encoding="utf-8").splitlines()
    assert lines == ["2024-03-10T12:00:00.000Z bbbbbb — not found in DB"]
    assert "bbbbbb" in ledger


def test_unknown_keys_after_midnight_go_to_new_file(lookup, today_clock, tmp_path):
    lookup.lookup("cccccc")
    today_clock.value = date(2024, 3, 11)
    lookup.lookup("dddddd")
    lookup.lookup("cccccc")

    first = (tmp_path / "unknown" / "unknown_hex_2024-03-10.log").read_text(encoding="utf-8")
    second = (tmp_path / "unknown" / "unknown_hex_2024-03-11.log").read_text(encoding="utf-8")
    assert "cccccc" in first
    assert "dddddd" in second
    assert "cccccc" not in second


def test_absent_key_is_not_looked_up(lookup, ledger):
    assert lookup.lookup("000000") is None
    assert len(ledger) == 0


def test_lookup_error_is_logged_and_treated_as_miss(reference_db, ledger, caplog):
    class BrokenSession:
        def __enter__(self):
            return self

        def __exit__(self, *exc):
            return False

        def get(self, *args, **kwargs):
            raise OperationalError("SELECT", {}, Exception("disk I/O error"))

    lookup = ReferenceLookup(lambda: BrokenSession(), ledger)

    with caplog.at_level(logging.ERROR, logger="vdl2feed.reference_lookup"):
        assert lookup.lookup("a12345") is None

    assert "DB lookup error for a12345" in caplog.text
    assert len(ledger) == 0


def test_debug_lookup_lines_emitted_once(lookup, caplog):
    with caplog.at_level(logging.INFO, logger="vdl2feed.reference_lookup"):
        lookup.lookup("a12345")
        lookup.lookup("a12345")

    matches = [r for r in caplog.records if "DB match for a12345" in r.getMessage()]
    assert len(matches) == 1


def test_missing_reference_store_is_fatal(tmp_path):
    with pytest.raises(ReferenceStoreError):
        open_reference_store(tmp_path / "missing.db")


def test_store_without_aircraft_table_is_fatal(tmp_path):
    path = tmp_path / "empty.db"
    engine = build_engine(path, readonly=False)
    with engine.connect() as conn:
        conn.exec_driver_sql("CREATE TABLE other (id INTEGER)")
        conn.commit()
    engine.dispose()

    with pytest.raises(ReferenceStoreError):
        open_reference_store(path)


def test_reference_store_is_opened_read_only(reference_db):
    session_factory = open_reference_store(reference_db)

    with session_factory() as session:
        with pytest.raises(OperationalError):
            session.connection().exec_driver_sql("DELETE FROM aircraft")


def test_failed_ledger_append_is_retried_on_next_miss(lookup, ledger, tmp_path, caplog):
    ledger_file = tmp_path / "unknown" / "unknown_hex_2024-03-10.log"
    ledger_file.mkdir()

    with caplog.at_level(logging.ERROR, logger="vdl2feed.reference_lookup"):
        assert lookup.lookup("eeeeee") is None

    assert "Failed to log unknown address eeeeee" in caplog.text
    assert "eeeeee" not in ledger

    ledger_file.rmdir()
    assert lookup.lookup("eeeeee") is None

    assert ledger_file.read_text(encoding="utf-8").splitlines() == [
        "2024-03-10T12:00:00.000Z eeeeee — not found in DB"
    ]
    assert "eeeeee" in ledger
