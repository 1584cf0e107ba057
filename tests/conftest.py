from datetime import date, datetime, timezone

import pytest
from sqlalchemy.orm import Session

from vdl2feed.db import init_reference_schema, open_reference_store
from vdl2feed.db_models import Aircraft
from vdl2feed.services import (
    Broadcaster,
    IngestPipeline,
    ReferenceLookup,
    RotatingLogWriter,
    StatsAggregator,
    UnknownKeyLedger,
)


class MutableClock:
    """Callable returning a value tests can move forward."""

    def __init__(self, value):
        self.value = value

    def __call__(self):
        return self.value


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def reference_db(tmp_path):
    path = tmp_path / "aircraft.db"
    engine = init_reference_schema(path)
    with Session(engine) as session:
        session.add_all(
            [
                Aircraft(icao="a12345", reg="N123", icaotype="B738", ownop="Acme Air"),
                Aircraft(
                    icao="ae1234",
                    reg="",
                    icaotype="C130",
                    model="Hercules",
                    manufacturer="Lockheed",
                    ownop="United States Air Force",
                    year="1988",
                    short_type="L4T",
                    mil=1,
                    faa_pia=0,
                    faa_ladd=1,
                ),
            ]
        )
        session.commit()
    engine.dispose()
    return path


@pytest.fixture
def today_clock():
    return MutableClock(date(2024, 3, 10))


@pytest.fixture
def ledger(tmp_path, today_clock):
    return UnknownKeyLedger(
        tmp_path / "unknown",
        clock=lambda: datetime(2024, 3, 10, 12, 0, tzinfo=timezone.utc),
        today=today_clock,
    )


@pytest.fixture
def lookup(reference_db, ledger):
    return ReferenceLookup(open_reference_store(reference_db), ledger, debug_lookups=True)


@pytest.fixture
def writer(tmp_path, today_clock):
    return RotatingLogWriter(tmp_path / "logs", prefix="received", clock=today_clock)


@pytest.fixture
def pipeline(lookup, writer):
    return IngestPipeline(
        lookup=lookup,
        writer=writer,
        stats=StatsAggregator(),
        broadcaster=Broadcaster(),
        debug_lookups=True,
        clock=lambda: datetime(2024, 3, 10, 12, 30, 15, tzinfo=timezone.utc),
    )
