"""테스트 인프라 — 임시 DB, 세션, httpx 클라이언트 픽스처.

Test infrastructure — Temporary database, session, and httpx client fixtures.
Uses a throwaway SQLite file via aiosqlite by default; set TEST_DATABASE_URL
to run against PostgreSQL instead. Schema is created per test and dropped
afterwards.
"""

import os
from collections.abc import AsyncGenerator
from pathlib import Path

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from member_search.database import Base, get_db, get_session_factory
from member_search.main import app
from member_search.models import Member, Team


# ---------------------------------------------------------------------------
# 엔진, 세션 팩토리, 세션
# ---------------------------------------------------------------------------
@pytest_asyncio.fixture
async def engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine, None]:
    """테스트용 async 엔진. 스키마를 생성하고 종료 시 삭제합니다."""
    url: str = os.environ.get(
        "TEST_DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'member_search.db'}"
    )
    eng = create_async_engine(url, echo=False)

    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield eng

    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await eng.dispose()


@pytest_asyncio.fixture
async def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """서비스 호출용 세션 팩토리 — Session factory handed to the service."""
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory: async_sessionmaker[AsyncSession]) -> AsyncGenerator[AsyncSession, None]:
    """각 테스트에 격리된 DB 세션을 제공합니다."""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncClient, None]:
    """FastAPI 테스트 클라이언트 — DB 세션과 세션 팩토리를 오버라이드합니다."""
    async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# 헬퍼 픽스처: 테스트용 데이터 생성
# ---------------------------------------------------------------------------
@pytest_asyncio.fixture
async def teams(db: AsyncSession) -> dict[str, Team]:
    """teamA, teamB 팀을 생성합니다."""
    result: dict[str, Team] = {}
    for name in ("teamA", "teamB"):
        team = Team(name=name)
        db.add(team)
        result[name] = team
    await db.commit()
    return result


@pytest_asyncio.fixture
async def members(db: AsyncSession, teams: dict[str, Team]) -> list[Member]:
    """member1~4 회원을 생성합니다 (teamA: 10, 20세 / teamB: 30, 40세)."""
    created: list[Member] = [
        Member(username="member1", age=10, team_id=teams["teamA"].id),
        Member(username="member2", age=20, team_id=teams["teamA"].id),
        Member(username="member3", age=30, team_id=teams["teamB"].id),
        Member(username="member4", age=40, team_id=teams["teamB"].id),
    ]
    db.add_all(created)
    await db.commit()
    return created


@pytest_asyncio.fixture
async def teamless_member(db: AsyncSession, members: list[Member]) -> Member:
    """팀이 없는 회원을 추가로 생성합니다."""
    member = Member(username="member5", age=50, team_id=None)
    db.add(member)
    await db.commit()
    return member


def usernames(rows) -> list[str]:
    """결과 행의 회원명을 정렬해 반환합니다 — Sorted usernames of result rows."""
    return sorted(row.username for row in rows)
