"""Shared fixtures: fake scheduler, in-memory database and API client."""
from __future__ import annotations

from datetime import datetime
from typing import Any, Callable, Dict, List

import pytest
from apscheduler.jobstores.base import JobLookupError
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from morning.api.deps import get_clock, get_run_manager
from morning.core.clock import FixedClock
from morning.db import Base
from morning.db.deps import get_db
from morning.services.run_manager import RunManager


class FakeJob:
    def __init__(self, scheduler: "FakeScheduler", job_id: str, func: Callable[..., Any], args: List[Any], kwargs: Dict[str, Any]):
        self.scheduler = scheduler
        self.id = job_id
        self.func = func
        self.args = args
        self.kwargs = kwargs

    def remove(self) -> None:
        if self.scheduler.jobs.get(self.id) is not self:
            raise JobLookupError(self.id)
        del self.scheduler.jobs[self.id]


class FakeScheduler:
    """Stands in for a BackgroundScheduler; jobs only run when ``fire`` is called."""

    def __init__(self):
        self.jobs: Dict[str, FakeJob] = {}
        self.added: List[FakeJob] = []

    def add_job(self, func, trigger=None, args=None, id=None, **kwargs) -> FakeJob:
        job = FakeJob(self, id, func, list(args or []), {"trigger": trigger, **kwargs})
        self.jobs[id] = job
        self.added.append(job)
        return job

    def fire(self, job_id: str, times: int = 1) -> None:
        for _ in range(times):
            job = self.jobs.get(job_id)
            if job is None:
                return
            job.func(*job.args)


@pytest.fixture()
def scheduler() -> FakeScheduler:
    return FakeScheduler()


@pytest.fixture()
def session_factory():
    """In-memory SQLite database with every table created."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )

    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_connection, connection_record):  # pragma: no cover - sqlite setup
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(bind=engine)
    yield sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    engine.dispose()


@pytest.fixture()
def clock() -> FixedClock:
    return FixedClock(datetime(2024, 1, 2, 7, 40))


@pytest.fixture()
def client(session_factory, scheduler, clock):
    """TestClient wired to the in-memory database, a fake scheduler and a pinned clock."""
    from morning.main import app

    manager = RunManager(scheduler, session_factory, clock=clock, persist_every_ticks=1)

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_run_manager] = lambda: manager
    app.dependency_overrides[get_clock] = lambda: clock
    yield TestClient(app)
    manager.shutdown()
    app.dependency_overrides.clear()
