import pytest
import pytest_asyncio

from partnerhub.config import Settings
from partnerhub.infra.db.session import Database
from partnerhub.services.experts import ExpertService
from partnerhub.services.preferences import PreferenceStore


PEER_DEFAULTS = {
    "preferred_partner_type": "p2p",
    "support_style": ["daily_checkin"],
    "available_categories": ["fitness"],
    "goal_categories": [],
    "time_commitment": "daily",
    "experience_level": "beginner",
}


@pytest.fixture
def settings():
    return Settings(_env_file=None, database_url="sqlite+aiosqlite://", log_level="DEBUG")


@pytest_asyncio.fixture
async def database():
    db = Database("sqlite+aiosqlite://")
    await db.create_all()
    yield db
    await db.dispose()


@pytest_asyncio.fixture
async def session(database):
    async with database.session_factory() as session:
        yield session


@pytest.fixture
def make_preferences(session):
    """Save preferences for a user; keyword overrides replace PEER_DEFAULTS."""
    store = PreferenceStore(session)

    async def _make(user_id, **overrides):
        return await store.upsert(user_id, {**PEER_DEFAULTS, **overrides})

    return _make


@pytest.fixture
def make_expert(session):
    service = ExpertService(session)

    async def _make(user_id, expertise_areas, rating=4.5, years=10, max_clients=5, clients=0, **overrides):
        expert = await service.create(
            user_id,
            {
                "expertise_areas": expertise_areas,
                "years_of_experience": years,
                "availability": {"max_clients": max_clients},
                **overrides,
            },
        )
        return await service.update(
            user_id,
            {"rating": rating, "total_clients_helped": clients},
            allow_admin_fields=True,
        )

    return _make
