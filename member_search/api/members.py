"""회원 라우터 — 회원 검색, 페이징 조회 및 생성 엔드포인트.

Member Router — Search, paged search and creation endpoints.
Serializes the search condition from query parameters (blank strings are
treated as absent by the predicate composer) and returns ``Page`` as JSON.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from member_search.config import settings
from member_search.database import get_db, get_session_factory
from member_search.schemas.member import (
    MemberCreate,
    MemberResponse,
    MemberSearchCondition,
    MemberTeamDto,
)
from member_search.services.member_service import member_service
from member_search.utils.exceptions import BadRequestError
from member_search.utils.pagination import CountStrategy, Page, PageRequest, SortOrder

router: APIRouter = APIRouter()


def search_condition(
    username: Annotated[str | None, Query(description="회원명 일치")] = None,
    team_name: Annotated[str | None, Query(alias="teamName", description="팀명 일치")] = None,
    age_goe: Annotated[int | None, Query(alias="ageGoe", description="나이 이상")] = None,
    age_loe: Annotated[int | None, Query(alias="ageLoe", description="나이 이하")] = None,
) -> MemberSearchCondition:
    """쿼리 파라미터에서 검색 조건을 생성합니다.

    Build the search condition from query parameters.
    """
    return MemberSearchCondition(
        username=username,
        team_name=team_name,
        age_goe=age_goe,
        age_loe=age_loe,
    )


@router.get("/members", response_model=list[MemberTeamDto])
async def search_members(
    condition: Annotated[MemberSearchCondition, Depends(search_condition)],
    session_factory: Annotated[async_sessionmaker[AsyncSession], Depends(get_session_factory)],
) -> list[MemberTeamDto]:
    """조건에 맞는 회원 목록을 조회합니다 (페이징 없음).

    Unpaged member search.
    """
    return await member_service.search(session_factory, condition)


@router.get("/members/page", response_model=Page[MemberTeamDto])
async def search_members_page(
    condition: Annotated[MemberSearchCondition, Depends(search_condition)],
    session_factory: Annotated[async_sessionmaker[AsyncSession], Depends(get_session_factory)],
    page: Annotated[int, Query(ge=0, description="페이지 번호, 0부터 시작")] = 0,
    size: Annotated[int, Query(description="페이지 크기")] = settings.DEFAULT_PAGE_SIZE,
    sort: Annotated[list[str] | None, Query(description="정렬: property,asc|desc")] = None,
    count: Annotated[CountStrategy, Query(description="개수 계산 전략")] = CountStrategy.DECOUPLED,
) -> Page[MemberTeamDto]:
    """조건에 맞는 회원을 페이지 단위로 조회합니다.

    Paged member search. ``size`` must be between 1 and MAX_PAGE_SIZE;
    ``count`` selects the coupled or decoupled total count.
    """
    if size > settings.MAX_PAGE_SIZE:
        raise BadRequestError(f"Page size must not exceed {settings.MAX_PAGE_SIZE}")
    orders: list[SortOrder] = [SortOrder.parse(raw) for raw in sort or []]
    page_request: PageRequest = PageRequest.of(page, size, *orders)
    return await member_service.search_page(session_factory, condition, page_request, count)


@router.get("/members/{member_id}", response_model=MemberResponse)
async def get_member(
    member_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> MemberResponse:
    """회원 상세 정보를 조회합니다."""
    return await member_service.get_member(db, member_id)


@router.post("/members", response_model=MemberResponse, status_code=201)
async def create_member(
    data: MemberCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> MemberResponse:
    """새 회원을 생성합니다.

    Create a new member, optionally assigned to a team.
    """
    result: MemberResponse = await member_service.create_member(db, data)
    await db.commit()
    return result
