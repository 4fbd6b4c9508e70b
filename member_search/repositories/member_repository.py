"""회원 레포지토리 — 동적 검색, 프로젝션, 페이징 쿼리.

Member Repository — Dynamic search, projection and paging queries.
Every search outer-joins members to teams (members without a team are kept),
filters with the fragments from ``member_predicates`` and selects only the
columns of ``MemberTeamDto``.

Counting:
    - ``fetch_content_with_total``: ``count(*) OVER ()`` 윈도우로 내용과 개수를 한 번에 조회
      (coupled: content and total in one round trip)
    - ``count``: 별도 카운트 쿼리, 팀 조건이 없으면 조인 생략
      (decoupled: separate count, joins teams only when a fragment needs it)
"""

from typing import Any, Sequence

from sqlalchemy import ColumnElement, Row, Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from member_search.models.member import Member, Team
from member_search.repositories.base import BaseRepository
from member_search.repositories.member_predicates import (
    accumulate,
    active_fragments,
    member_search_fragments,
    requires_team_join,
    where_clauses,
)
from member_search.schemas.member import MemberSearchCondition, MemberTeamDto
from member_search.utils.pagination import (
    ROW_BOUND_MAX,
    CountStrategy,
    Page,
    PageRequest,
    SortDirection,
)

# 프로젝션 컬럼 — MemberTeamDto 필드만 조회 (Only the columns MemberTeamDto needs)
_PROJECTION: tuple[ColumnElement[Any], ...] = (
    Member.id.label("member_id"),
    Member.username.label("username"),
    Member.age.label("age"),
    Team.id.label("team_id"),
    Team.name.label("team_name"),
)

# 정렬 가능한 속성 — Sortable projected properties
SORTABLE_COLUMNS: dict[str, ColumnElement[Any]] = {
    "member_id": Member.id,
    "username": Member.username,
    "age": Member.age,
    "team_id": Team.id,
    "team_name": Team.name,
}


def _to_dto(row: Row[Any]) -> MemberTeamDto:
    return MemberTeamDto(
        member_id=row.member_id,
        username=row.username,
        age=row.age,
        team_id=row.team_id,
        team_name=row.team_name,
    )


class MemberRepository(BaseRepository[Member]):
    """회원 테이블에 대한 검색 쿼리를 담당하는 레포지토리.

    Repository handling search queries over members and their teams.
    Stateless: the session is passed into every call.
    """

    def __init__(self) -> None:
        super().__init__(Member)

    def projection_query(self, clauses: Sequence[ColumnElement[bool]] = ()) -> Select:
        """회원-팀 외부 조인 + 프로젝션 + 조건절 쿼리를 생성합니다.

        Build ``members LEFT OUTER JOIN teams`` selecting the projected
        columns, filtered by ``clauses``.
        """
        return (
            select(*_PROJECTION)
            .select_from(Member)
            .outerjoin(Member.team)
            .where(*clauses)
        )

    def _apply_page(self, query: Select, page: PageRequest) -> Select:
        """정렬과 오프셋/리밋을 적용합니다 — Apply ordering and the page window."""
        for order in page.sort:
            column: ColumnElement[Any] = SORTABLE_COLUMNS[order.property]
            query = query.order_by(column.desc() if order.direction == SortDirection.DESC else column.asc())
        return query.offset(page.offset).limit(min(page.limit, ROW_BOUND_MAX))

    async def search(
        self,
        db: AsyncSession,
        condition: MemberSearchCondition,
    ) -> list[MemberTeamDto]:
        """where 파라미터 방식으로 회원을 검색합니다 (페이징 없음).

        Search with the fragment-list strategy, unpaged.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            condition: 검색 조건 (Search condition)

        Returns:
            list[MemberTeamDto]: 검색 결과 (Matching rows, natural order)
        """
        result = await db.execute(self.projection_query(where_clauses(condition)))
        return [_to_dto(row) for row in result.all()]

    async def search_by_builder(
        self,
        db: AsyncSession,
        condition: MemberSearchCondition,
    ) -> list[MemberTeamDto]:
        """Builder 방식으로 회원을 검색합니다 — ``search``와 같은 결과.

        Search with the accumulator strategy; returns the same rows as ``search``.
        """
        result = await db.execute(self.projection_query((accumulate(condition),)))
        return [_to_dto(row) for row in result.all()]

    async def find_members(
        self,
        db: AsyncSession,
        condition: MemberSearchCondition,
    ) -> list[Member]:
        """조건절을 재사용하여 회원 엔티티를 조회합니다.

        Fetch Member entities (not projected) with the same fragments.
        """
        query: Select = (
            select(Member)
            .outerjoin(Member.team)
            .where(*where_clauses(condition))
            .order_by(Member.id)
        )
        result = await db.execute(query)
        return list(result.scalars().all())

    async def exists_matching(
        self,
        db: AsyncSession,
        condition: MemberSearchCondition,
    ) -> bool:
        """조건에 맞는 회원이 존재하는지 확인합니다.

        Existence check reusing the fragments; joins teams only when needed.
        """
        fragments = member_search_fragments(condition)
        query: Select = select(Member.id).select_from(Member)
        if requires_team_join(fragments):
            query = query.outerjoin(Member.team)
        query = query.where(*(f.clause for f in active_fragments(fragments))).limit(1)
        return (await db.execute(query)).first() is not None

    async def fetch_content(
        self,
        db: AsyncSession,
        condition: MemberSearchCondition,
        page: PageRequest,
    ) -> list[MemberTeamDto]:
        """페이지 내용만 조회합니다 — Fetch one page of rows, no count."""
        if page.past_row_bound:
            return []
        query: Select = self._apply_page(self.projection_query(where_clauses(condition)), page)
        result = await db.execute(query)
        return [_to_dto(row) for row in result.all()]

    async def fetch_content_with_total(
        self,
        db: AsyncSession,
        condition: MemberSearchCondition,
        page: PageRequest,
    ) -> tuple[list[MemberTeamDto], int]:
        """내용과 전체 개수를 한 번의 쿼리로 조회합니다.

        Coupled fetch: every row carries ``count(*) OVER ()``, the size of
        the filtered set before OFFSET/LIMIT. When the offset is past the
        end no row comes back to carry it, so the total falls back to
        ``count``, as it does for an offset too large to bind.

        Returns:
            tuple[list[MemberTeamDto], int]: (페이지 내용, 전체 개수)
                                             (Page content, total count)
        """
        if page.past_row_bound:
            return [], await self.count(db, condition)
        query: Select = self.projection_query(where_clauses(condition)).add_columns(
            func.count().over().label("total")
        )
        result = await db.execute(self._apply_page(query, page))
        rows = result.all()

        if rows:
            return [_to_dto(row) for row in rows], int(rows[0].total)
        if page.offset == 0:
            return [], 0
        return [], await self.count(db, condition)

    async def count(
        self,
        db: AsyncSession,
        condition: MemberSearchCondition,
    ) -> int:
        """조건에 맞는 전체 회원 수를 조회합니다.

        Decoupled count query. Member -> Team is many-to-one, so the outer
        join never changes the row count; it is added only when a fragment
        reads Team columns.
        """
        fragments = member_search_fragments(condition)
        query: Select = select(func.count(Member.id)).select_from(Member)
        if requires_team_join(fragments):
            query = query.outerjoin(Member.team)
        query = query.where(*(f.clause for f in active_fragments(fragments)))
        return (await db.execute(query)).scalar() or 0

    async def search_page(
        self,
        db: AsyncSession,
        condition: MemberSearchCondition,
        page: PageRequest,
        count_strategy: CountStrategy = CountStrategy.DECOUPLED,
    ) -> Page[MemberTeamDto]:
        """단일 세션에서 페이지 검색을 수행합니다.

        Paged search on one session, sub-queries run one after another.
        ``MemberService.search_page`` runs the decoupled queries concurrently
        on separate sessions instead. The page request must already be
        validated.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            condition: 검색 조건 (Search condition)
            page: 페이지 요청 (Page request)
            count_strategy: 개수 계산 전략 (Count strategy)

        Returns:
            Page[MemberTeamDto]: 페이지 결과 (Page of projected rows)
        """
        if count_strategy == CountStrategy.COUPLED:
            content, total = await self.fetch_content_with_total(db, condition, page)
        else:
            content = await self.fetch_content(db, condition, page)
            total = await self.count(db, condition)
        return Page[MemberTeamDto].of(content, page, total)

    async def find_by_username(self, db: AsyncSession, username: str) -> list[Member]:
        """회원명으로 회원 목록을 조회합니다 — Members with exactly this name."""
        result = await db.execute(
            select(Member).where(Member.username == username).order_by(Member.id)
        )
        return list(result.scalars().all())


# 싱글턴 인스턴스 — Singleton instance
member_repository: MemberRepository = MemberRepository()
