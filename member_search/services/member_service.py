"""회원 서비스 — 회원 검색, 페이징 및 생성 비즈니스 로직.

Member Service — Business logic for member search, paging and creation.
Validates page requests before any I/O, scopes sessions per call, runs the
decoupled content/count queries concurrently, enforces the per-call timeout
and turns storage failures into a single ``StorageError``.
"""

import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from member_search.config import settings
from member_search.models.member import Member, Team
from member_search.repositories.member_repository import SORTABLE_COLUMNS, member_repository
from member_search.repositories.team_repository import team_repository
from member_search.schemas.member import (
    MemberCreate,
    MemberResponse,
    MemberSearchCondition,
    MemberTeamDto,
    TeamCreate,
    TeamResponse,
)
from member_search.utils.exceptions import DuplicateError, NotFoundError, StorageError
from member_search.utils.pagination import CountStrategy, Page, PageRequest, validate_page_request

logger: logging.Logger = logging.getLogger(__name__)

T = TypeVar("T")

# 저장소 실패로 취급할 예외 — Failures raised by SQLAlchemy or, untranslated, by the driver
# (connection errors and driver timeouts are OSError; unbindable integers are OverflowError)
_STORAGE_FAILURES: tuple[type[Exception], ...] = (SQLAlchemyError, OSError, OverflowError)


class MemberService:
    """회원 관련 비즈니스 로직을 처리하는 서비스.

    Service handling member search and creation.
    Search methods take a session factory and open their own sessions;
    write methods take the request session like the routers provide it.
    """

    async def _run(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        operation: str,
        sub_query: str,
        fetch: Callable[[AsyncSession], Awaitable[T]],
    ) -> T:
        """새 세션에서 조회를 실행합니다. 세션은 모든 경로에서 닫힙니다.

        Run one read on a fresh session, closed on every exit path.
        SQLAlchemy and driver failures become ``StorageError`` naming the
        sub-query. Cancellation passes through untouched.
        """
        try:
            async with session_factory() as db:
                return await fetch(db)
        except _STORAGE_FAILURES as exc:
            logger.warning("Storage failure in %s (%s): %s", operation, sub_query, exc)
            raise StorageError(operation, sub_query, type(exc).__name__) from exc

    async def search(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        condition: MemberSearchCondition,
    ) -> list[MemberTeamDto]:
        """조건에 맞는 모든 회원을 조회합니다 (페이징 없음, 소량 결과용).

        Unpaged search for small result sets. An empty list is a normal result.

        Args:
            session_factory: 세션 팩토리 (Session factory)
            condition: 검색 조건 (Search condition)

        Returns:
            list[MemberTeamDto]: 검색 결과 (Matching rows)

        Raises:
            StorageError: 저장소 조회 실패 (Storage failure)
        """
        return await self._run(
            session_factory,
            "search",
            "content",
            lambda db: member_repository.search(db, condition),
        )

    async def search_page(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        condition: MemberSearchCondition,
        page: PageRequest,
        count_strategy: CountStrategy = CountStrategy.DECOUPLED,
        timeout: float | None = None,
    ) -> Page[MemberTeamDto]:
        """조건에 맞는 회원을 페이지 단위로 조회합니다.

        Paged search.

        COUPLED runs one query on one session; its total always matches the
        content. DECOUPLED runs the content and count queries concurrently,
        each on its own session, so under concurrent writes ``total_elements``
        is only approximately consistent with ``content`` unless the store
        provides snapshot isolation across sessions.

        One timeout covers the whole call. If either sub-query fails or the
        timeout expires, the other is cancelled and a single StorageError is
        raised; a partial page is never returned.

        Args:
            session_factory: 세션 팩토리 (Session factory)
            condition: 검색 조건 (Search condition)
            page: 페이지 요청 (Page request: offset, limit, sort)
            count_strategy: 개수 계산 전략 (Count strategy)
            timeout: 타임아웃(초), None이면 설정값 사용
                     (Timeout in seconds; None uses QUERY_TIMEOUT_SECONDS)

        Returns:
            Page[MemberTeamDto]: 페이지 결과 (Page of projected rows)

        Raises:
            BadRequestError: 잘못된 페이지 요청, I/O 이전에 발생 (Invalid page request, raised before I/O)
            StorageError: 저장소 조회 실패 또는 타임아웃 (Storage failure or timeout)
        """
        validate_page_request(page, SORTABLE_COLUMNS)
        limit_seconds: float = settings.QUERY_TIMEOUT_SECONDS if timeout is None else timeout

        if count_strategy == CountStrategy.COUPLED:
            coupled: Awaitable[tuple[list[MemberTeamDto], int]] = self._run(
                session_factory,
                "search_page",
                "content",
                lambda db: member_repository.fetch_content_with_total(db, condition, page),
            )
            try:
                content, total = await asyncio.wait_for(coupled, limit_seconds)
            except asyncio.TimeoutError:
                raise StorageError("search_page", "timeout", f"exceeded {limit_seconds}s") from None
        else:
            content, total = await self._fetch_decoupled(
                session_factory, condition, page, limit_seconds
            )

        return Page[MemberTeamDto].of(content, page, total)

    async def _fetch_decoupled(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        condition: MemberSearchCondition,
        page: PageRequest,
        limit_seconds: float,
    ) -> tuple[list[MemberTeamDto], int]:
        """내용 쿼리와 카운트 쿼리를 동시에 실행합니다.

        Run content and count as two tasks. Whatever happens, both tasks are
        finished (completed or cancelled) before this returns or raises.
        """
        content_task: asyncio.Task[list[MemberTeamDto]] = asyncio.ensure_future(
            self._run(
                session_factory,
                "search_page",
                "content",
                lambda db: member_repository.fetch_content(db, condition, page),
            )
        )
        count_task: asyncio.Task[int] = asyncio.ensure_future(
            self._run(
                session_factory,
                "search_page",
                "count",
                lambda db: member_repository.count(db, condition),
            )
        )
        tasks = (content_task, count_task)
        try:
            content, total = await asyncio.wait_for(asyncio.gather(*tasks), limit_seconds)
        except asyncio.TimeoutError:
            raise StorageError("search_page", "timeout", f"exceeded {limit_seconds}s") from None
        finally:
            for task in tasks:
                if not task.done():
                    task.cancel()
            # 취소된 작업의 세션 정리까지 대기 (Wait until cancelled tasks release their sessions)
            await asyncio.gather(*tasks, return_exceptions=True)
        return content, total

    async def get_member(self, db: AsyncSession, member_id: int) -> MemberResponse:
        """회원 단건 조회 — Single member lookup.

        Raises:
            NotFoundError: 회원이 없는 경우 (Member not found)
        """
        member: Member | None = await member_repository.get_by_id(db, member_id)
        if member is None:
            raise NotFoundError("Member not found")
        return MemberResponse.model_validate(member)

    async def create_team(self, db: AsyncSession, data: TeamCreate) -> TeamResponse:
        """새 팀을 생성합니다.

        Create a team.

        Raises:
            DuplicateError: 같은 이름의 팀이 이미 존재 (Team name already taken)
        """
        if await team_repository.get_by_name(db, data.name) is not None:
            raise DuplicateError("Team name already exists")
        try:
            team: Team = await team_repository.create(db, {"name": data.name})
        except IntegrityError as exc:
            raise DuplicateError("Team name already exists") from exc
        return TeamResponse.model_validate(team)

    async def create_member(self, db: AsyncSession, data: MemberCreate) -> MemberResponse:
        """새 회원을 생성합니다.

        Create a member, optionally in an existing team.

        Raises:
            NotFoundError: 지정한 팀이 없는 경우 (Team not found)
        """
        if data.team_id is not None and await team_repository.get_by_id(db, data.team_id) is None:
            raise NotFoundError("Team not found")
        member: Member = await member_repository.create(db, data.model_dump())
        return MemberResponse.model_validate(member)


# 싱글턴 인스턴스 — Singleton instance
member_service: MemberService = MemberService()
