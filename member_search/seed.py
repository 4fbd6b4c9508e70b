"""초기 데이터 시드 스크립트 — 팀과 회원 생성.

Seed script — Creates demo teams and members for trying out searches.
Run this script once to bootstrap the database.

Usage:
    python -m member_search.seed

Creates:
    - 2개 팀: teamA, teamB (2 teams)
    - 100명 회원: member0 ~ member99, 나이 0 ~ 99, 팀 번갈아 배정
      (100 members with ages 0..99, alternating between the teams)
"""

import asyncio

from sqlalchemy import select

from member_search.database import async_session, engine, Base
from member_search.models import Member, Team

MEMBER_COUNT: int = 100


async def seed() -> None:
    """데이터베이스를 초기 데이터로 시드합니다.

    Seed the database with demo data.
    Creates tables if they don't exist, then inserts teams and members.

    Idempotent: 이미 시드된 경우 건너뜁니다 (Skips if already seeded).
    """
    # 테이블 생성 — DDL 실행 (Create all tables from ORM metadata)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with async_session() as db:
        # 팀이 하나라도 있으면 건너뜀 (Skip if any team exists)
        result = await db.execute(select(Team).limit(1))
        if result.scalar_one_or_none():
            print("Already seeded. Skipping.")
            return

        teams: list[Team] = [Team(name="teamA"), Team(name="teamB")]
        db.add_all(teams)
        await db.flush()  # flush로 team.id 생성 (Flush to generate team ids)

        for i in range(MEMBER_COUNT):
            db.add(Member(username=f"member{i}", age=i, team_id=teams[i % 2].id))

        await db.commit()
        print(f"Seeded: {len(teams)} teams, {MEMBER_COUNT} members")


if __name__ == "__main__":
    asyncio.run(seed())
