"""Shared fixtures: an isolated store per test and a small course tree."""

import pytest

from eduarch.config.app_config import clear_config_cache
from eduarch.store import DomainStore


@pytest.fixture(autouse=True)
def _fresh_config(monkeypatch):
    """Never leak config (or EDUARCH_DB_PATH) between tests."""
    monkeypatch.delenv("EDUARCH_DB_PATH", raising=False)
    clear_config_cache()
    yield
    clear_config_cache()


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "db" / "test.db"


@pytest.fixture
def store(db_path):
    """Empty store with the restrict delete policy."""
    return DomainStore(db_path, delete_policy="restrict")


@pytest.fixture
def teacher(store):
    return store.users.create(name="Ada Lovelace", email="ada@example.com", role="TEACHER")


@pytest.fixture
def student(store):
    return store.users.create(name="Alan Turing", email="alan@example.com", role="STUDENT")


@pytest.fixture
def course(store, teacher):
    return store.courses.create(
        title="Analytical Engines", description="Intro course", teacher_id=teacher.id
    )


@pytest.fixture
def module(store, course):
    return store.modules.create(title="Basics", course_id=course.id, order=1)


@pytest.fixture
def assignment(store, module):
    return store.assignments.create(
        title="Homework 1",
        description="First steps",
        due_date="2026-11-01T12:00:00+00:00",
        module_id=module.id,
        total_points=100,
    )
