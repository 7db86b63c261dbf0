"""
Pytest configuration and shared fixtures.

Every test gets its own SQLite file so sessions opened from the same
factory really are separate connections.
"""
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine  # noqa: E402

from drill_engine.core.security import create_access_token  # noqa: E402
from drill_engine.db.base import Base  # noqa: E402
from drill_engine.models.drill_queue import DrillQueueEntry  # noqa: E402

USER_ID = "8d1f6a2e-0000-4000-8000-000000000001"
OTHER_USER_ID = "8d1f6a2e-0000-4000-8000-000000000002"

FIXED_NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def now():
    return FIXED_NOW


@pytest.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'drills.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def make_entry(session_factory, now):
    """Insert a queue row directly, the way the bootstrap step would."""

    async def _make(user_id=USER_ID, leak_tag="position_awareness", repetition=0, due_at=None, **extra):
        async with session_factory() as s:
            entry = DrillQueueEntry(
                user_id=user_id,
                leak_tag=leak_tag,
                status=extra.pop("status", "due"),
                due_at=due_at or now - timedelta(hours=1),
                repetition=repetition,
                version=extra.pop("version", 0),
                created_at=now - timedelta(days=3),
                updated_at=now - timedelta(days=3),
                **extra,
            )
            s.add(entry)
            await s.commit()
            return entry

    return _make


@pytest.fixture
def action_scenario():
    return {
        "game": "NLHE 6-max",
        "hero_pos": "BTN",
        "villain_pos": "BB",
        "effective_stack_bb": 100,
        "hero_cards": ["Ah", "Qd"],
        "board": {"flop": ["Qs", "7h", "2c"], "turn": None, "river": None},
        "pot_bb": 6.5,
        "street": "flop",
        "action_to_hero": {"type": "bet", "size_bb": 3},
        "correct_action": "raise",
        "explanation": "Top pair, top kicker: raise for value.",
        "difficulty": "medium",
    }


@pytest.fixture
def sizing_scenario():
    return {
        "drill_type": "raise_sizing",
        "hero_pos": "CO",
        "villain_pos": "BTN",
        "hero_cards": ["Kc", "Kd"],
        "board": {"flop": ["9s", "5d", "2h"], "turn": "Jc", "river": None},
        "pot_bb": 12,
        "street": "turn",
        "action_to_hero": {"type": "bet", "size_bb": 6},
        "options": ["2.5x", "3x", "overbet"],
        "correct_option": "3x",
        "rule_of_thumb": "Raise 3x on dry boards.",
        "explanation": "3x keeps worse overpairs in.",
    }


def auth_headers(user_id: str = USER_ID) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user_id)}"}
