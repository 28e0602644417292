import os
import tempfile

# Point the app at a throwaway sqlite file before anything imports biopeak.db
_DB_DIR = tempfile.mkdtemp(prefix="biopeak-tests-")
os.environ.setdefault("DATABASE_URL", f"sqlite+pysqlite:///{os.path.join(_DB_DIR, 'app.db')}")

from datetime import date, datetime, timezone  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from biopeak.db import Base, get_db, get_session_factory  # noqa: E402
from biopeak.main import app  # noqa: E402  (registers every table on Base)
from biopeak.models.activity import Activity  # noqa: E402
from biopeak.services.sources import profile_for  # noqa: E402

START_TS = 1_700_000_000  # 2023-11-14 22:13:20 UTC


@pytest.fixture
def engine(tmp_path):
    eng = create_engine(
        f"sqlite+pysqlite:///{tmp_path / 'test.db'}",
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.state.pace_cache.invalidate()
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def add_activity(db, user_id="u1", activity_id="a1", source="garmin", **fields):
    fields.setdefault("activity_type", "RUNNING")
    fields.setdefault("activity_date", date(2023, 11, 14))
    fields.setdefault("start_time", datetime.fromtimestamp(START_TS, tz=timezone.utc))
    row = Activity(user_id=user_id, activity_id=activity_id, activity_source=source, **fields)
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


def add_samples(
    db,
    heart_rates,
    speeds=None,
    user_id="u1",
    activity_id="a1",
    source="garmin",
    interval=1.0,
    start_ts=START_TS,
):
    """Store one sample per heart rate entry, integrating speed into distance."""
    model = profile_for(source).sample_model
    speeds = speeds if speeds is not None else [None] * len(heart_rates)
    distance = 0.0
    rows = []
    for i, (hr, speed) in enumerate(zip(heart_rates, speeds)):
        if i > 0 and speeds[i - 1]:
            distance += speeds[i - 1] * interval
        rows.append(
            model(
                user_id=user_id,
                activity_id=activity_id,
                sample_timestamp=int(start_ts + i * interval),
                heart_rate=hr,
                speed_meters_per_second=speed,
                total_distance_in_meters=round(distance, 3),
            )
        )
    db.add_all(rows)
    db.commit()
    return rows


def add_track(db, distances, times, user_id="u1", activity_id="a1", source="garmin", heart_rate=150):
    """Store samples from explicit cumulative distances and second offsets."""
    model = profile_for(source).sample_model
    db.add_all(
        model(
            user_id=user_id,
            activity_id=activity_id,
            sample_timestamp=START_TS + t,
            heart_rate=heart_rate,
            total_distance_in_meters=d,
        )
        for d, t in zip(distances, times)
    )
    db.commit()


@pytest.fixture
def steady_run(db):
    """2 km at 5:00/km (10 m every 3 s) with a steady heart rate, plus its activity row."""
    n = 201
    distances = [i * 10.0 for i in range(n)]
    times = [i * 3 for i in range(n)]
    add_activity(db, total_distance_meters=2000.0, total_time_seconds=600.0, average_heart_rate=150, max_heart_rate=160)
    add_track(db, distances, times)
    return {"user_id": "u1", "activity_id": "a1", "source": "garmin"}
