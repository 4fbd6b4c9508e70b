"""팀 레포지토리 — 팀 조회 및 생성.

Team Repository — Team lookups used by member creation and seeding.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from member_search.models.member import Team
from member_search.repositories.base import BaseRepository


class TeamRepository(BaseRepository[Team]):
    """팀 테이블에 대한 데이터베이스 쿼리를 담당하는 레포지토리."""

    def __init__(self) -> None:
        super().__init__(Team)

    async def get_by_name(self, db: AsyncSession, name: str) -> Team | None:
        """팀 이름으로 팀을 조회합니다 — Look up a team by its unique name."""
        result = await db.execute(select(Team).where(Team.name == name))
        return result.scalar_one_or_none()


# 싱글턴 인스턴스 — Singleton instance
team_repository: TeamRepository = TeamRepository()
