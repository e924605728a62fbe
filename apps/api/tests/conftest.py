"""
Pytest fixtures for testing.

Provides:
- Test client against the FastAPI app with a seeded definition store
- Canonical definition fixtures
- Controllable clock and storage doubles for the feature repository
"""

from datetime import datetime, timedelta, timezone
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from flagsync.main import app
from flagsync.core.features import MemoryDefinitionStore, SDKConnection, get_definition_store


# ============ Canonical Definitions ============


def make_features() -> dict:
    """A canonical feature map touching every rule tier."""
    return {
        "checkout_v2": {
            "defaultValue": False,
            "project": "web",
            "rules": [
                {
                    "id": "fr_1",
                    "key": "checkout-exp",
                    "variations": [False, True],
                    "weights": [0.5, 0.5],
                    "coverage": 1,
                    "hashAttribute": "id",
                    "condition": {"id": {"$ingroup": "beta"}},
                    "hashVersion": 2,
                    "seed": "checkout-exp",
                    "fallbackAttribute": "deviceId",
                    "bucketVersion": 1,
                },
                {
                    "id": "fr_2",
                    "force": True,
                    "parentConditions": [
                        {"id": "parent_flag", "condition": {"value": True}},
                    ],
                },
                {"id": "fr_3", "force": False, "condition": {"country": "US"}},
            ],
        },
        "gated_banner": {
            "defaultValue": "off",
            "rules": [
                {
                    "force": "on",
                    "hashVersion": 2,
                    "parentConditions": [
                        {"id": "parent_flag", "condition": {"value": True}, "gate": True},
                    ],
                },
            ],
        },
        "dark_mode": {
            "defaultValue": True,
            "project": "mobile",
        },
    }


def make_experiments() -> list:
    return [
        {
            "key": "hero-copy",
            "changeId": "c1",
            "variations": [{}, {}],
            "condition": {"id": {"$ningroup": "staff"}},
        },
        {
            "key": "new-landing",
            "changeType": "redirect",
            "urlPatterns": [{"type": "simple", "pattern": "/landing"}],
            "variations": [{"urlRedirect": "/a"}, {"urlRedirect": "/b"}],
        },
        {
            "key": "upsell",
            "variations": [{}, {}],
            "parentConditions": [{"id": "checkout_v2", "condition": {"value": True}}],
        },
    ]


def make_id_lists() -> dict:
    return {
        "beta": ["u1", "u2"],
        "staff": ["s1"],
    }


@pytest.fixture
def features() -> dict:
    return make_features()


@pytest.fixture
def experiments() -> list:
    return make_experiments()


@pytest.fixture
def id_lists() -> dict:
    return make_id_lists()


@pytest.fixture
def definition_store() -> MemoryDefinitionStore:
    """Memory store seeded with one connection per interesting SDK profile."""
    store = MemoryDefinitionStore()
    store.seed(
        connections=[
            SDKConnection(key="sdk-legacy", name="Legacy SDK"),
            SDKConnection(
                key="sdk-modern",
                name="Modern SDK",
                capabilities=[
                    "bucketingV2",
                    "stickyBucketing",
                    "prerequisites",
                    "savedGroupReferences",
                    "redirects",
                ],
            ),
            SDKConnection(
                key="sdk-web",
                name="Web only",
                projects=["web"],
                include_experiments=False,
            ),
        ],
        features=make_features(),
        experiments=make_experiments(),
        id_lists=make_id_lists(),
    )
    return store


@pytest_asyncio.fixture(scope="function")
async def client(definition_store: MemoryDefinitionStore) -> AsyncGenerator[AsyncClient, None]:
    """
    Test client with definition store override.
    """

    async def override_get_definition_store():
        return definition_store

    app.dependency_overrides[get_definition_store] = override_get_definition_store

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client

    app.dependency_overrides.clear()


# ============ Mock Implementations ============


class FakeClock:
    """Manually advanced clock for staleness tests."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


class FailingStorage:
    """Storage whose writes always fail."""

    def __init__(self):
        self.write_attempts = 0

    async def get_item(self, key: str) -> str | None:
        return None

    async def set_item(self, key: str, value: str) -> None:
        self.write_attempts += 1
        raise OSError("disk full")

    async def remove_item(self, key: str) -> None:
        raise OSError("disk full")


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def failing_storage() -> FailingStorage:
    return FailingStorage()
