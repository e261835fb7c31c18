"""Shared fixtures for the input controls test suite."""

import asyncio
import os
from unittest.mock import patch

import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine

# ---- Environment setup (MUST happen before any api module import) ----
os.environ.setdefault("ES_URL", "http://localhost:9200")
os.environ.setdefault("KIBANA_URL", "http://kibana-test:5601")
os.environ.setdefault("FILTER_DB_URL", "sqlite://")


# ── Pydantic model factories ─────────────────────────────────────────


@pytest.fixture
def make_control_params():
    """Factory for ControlParams instances with sensible defaults."""
    from control_models import ControlParams, ListControlOptions

    def _factory(**overrides):
        options = overrides.pop("options", {})
        defaults = dict(
            id="ctrl-1",
            field_name="status",
            index_pattern="logs-dv",
            options=ListControlOptions(**options),
        )
        defaults.update(overrides)
        return ControlParams(**defaults)

    return _factory


@pytest.fixture
def make_index_pattern():
    """Factory for IndexPattern instances: status (string), bytes (number), hour (scripted number)."""
    from control_models import IndexPattern, NamedField, ScriptedField

    def _factory(**overrides):
        defaults = dict(
            id="logs-dv",
            title="logs-*",
            time_field_name="@timestamp",
            fields=[
                NamedField(name="status", type="string"),
                NamedField(name="bytes", type="number"),
                NamedField(name="@timestamp", type="date"),
                ScriptedField(
                    name="hour",
                    type="number",
                    script="doc['@timestamp'].value.getHour()",
                    lang="painless",
                ),
            ],
        )
        defaults.update(overrides)
        return IndexPattern(**defaults)

    return _factory


def terms_response(*keys):
    return {
        "aggregations": {
            "termsAgg": {
                "buckets": [{"key": k, "doc_count": 10 - i} for i, k in enumerate(keys)]
            }
        }
    }


# ── Fake collaborators ────────────────────────────────────────────────


class FakeSearchService:
    """Records SearchRequests; per-call responses and gates for ordering tests."""

    def __init__(self):
        self.requests = []
        self.responses = []
        self.default_response = terms_response()
        self.gates: dict[int, asyncio.Event] = {}

    def set_buckets(self, *keys):
        self.default_response = terms_response(*keys)

    async def search(self, request):
        self.requests.append(request)
        call = len(self.requests)
        gate = self.gates.get(call)
        if gate is not None:
            await gate.wait()
        if call <= len(self.responses):
            return self.responses[call - 1]
        return self.default_response


class FakeIndexPatterns:

    def __init__(self, *index_patterns):
        self.index_patterns = {ip.id: ip for ip in index_patterns}

    async def get(self, index_pattern_id):
        from errors import IndexPatternNotFoundError

        try:
            return self.index_patterns[index_pattern_id]
        except KeyError:
            raise IndexPatternNotFoundError(index_pattern_id) from None


@pytest.fixture
def fake_search():
    return FakeSearchService()


@pytest.fixture
def filter_store():
    from filter_store import InMemoryFilterStore

    return InMemoryFilterStore()


@pytest.fixture
def make_services(make_index_pattern, fake_search, filter_store):
    """Factory for ControlServices wired to fakes."""
    from control import ControlServices

    def _factory(index_pattern=None, time_range=None):
        return ControlServices(
            index_patterns=FakeIndexPatterns(index_pattern or make_index_pattern()),
            search=fake_search,
            filter_store=filter_store,
            time_range=time_range,
        )

    return _factory


@pytest.fixture
def make_filter_manager(make_index_pattern, filter_store):
    from filter_manager import PhraseFilterManager

    def _factory(control_id="ctrl-1", field_name="status", index_pattern=None):
        return PhraseFilterManager(
            control_id, field_name, index_pattern or make_index_pattern(), filter_store
        )

    return _factory


# ── In-memory SQLite ──────────────────────────────────────────────────


@pytest.fixture
def sql_engine():
    import filter_store  # noqa: F401  (registers the table)

    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )
    SQLModel.metadata.create_all(engine)
    return engine


# ── FastAPI TestClient with fake collaborators ────────────────────────


@pytest.fixture
def test_client(make_services, filter_store, fake_search):
    """FastAPI TestClient with fake index patterns/search and an in-memory filter store."""
    import main

    services = make_services()
    main.app.dependency_overrides[main.get_services] = lambda: services

    with patch("main.filter_store", filter_store):
        from fastapi.testclient import TestClient
        client = TestClient(main.app)
        yield client, fake_search

    main.app.dependency_overrides.clear()
    main._controls.clear()
