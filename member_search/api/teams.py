"""팀 라우터 — 팀 생성 엔드포인트.

Team Router — Team creation endpoint.
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from member_search.database import get_db
from member_search.schemas.member import TeamCreate, TeamResponse
from member_search.services.member_service import member_service

router: APIRouter = APIRouter()


@router.post("/teams", response_model=TeamResponse, status_code=201)
async def create_team(
    data: TeamCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> TeamResponse:
    """새 팀을 생성합니다. 이름이 중복되면 409를 반환합니다."""
    result: TeamResponse = await member_service.create_team(db, data)
    await db.commit()
    return result
