"""회원 레포지토리 검색/페이징 테스트.

Member repository tests — search scenarios, both composition strategies,
outer join behaviour, paging windows and the two count strategies.
"""

import itertools

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from member_search.models.member import Member
from member_search.repositories.member_repository import member_repository
from member_search.schemas.member import MemberSearchCondition
from member_search.utils.pagination import CountStrategy, PageRequest, SortDirection, SortOrder
from tests.conftest import usernames

# 조합 테스트용 필드 값 — Field values for exhaustive condition combinations
USERNAMES = [None, "", "   ", "member1", "member9"]
TEAM_NAMES = [None, "", "teamA", "teamB", "teamC"]
AGE_GOES = [None, 0, 20, 35]
AGE_LOES = [None, 15, 35, 100]


def all_conditions() -> list[MemberSearchCondition]:
    return [
        MemberSearchCondition(username=u, team_name=t, age_goe=goe, age_loe=loe)
        for u, t, goe, loe in itertools.product(USERNAMES, TEAM_NAMES, AGE_GOES, AGE_LOES)
    ]


class TestSearch:
    """페이징 없는 검색 테스트."""

    async def test_search_age_range(self, db: AsyncSession, members):
        """나이 20~35 → member2, member3."""
        rows = await member_repository.search(
            db, MemberSearchCondition(age_goe=20, age_loe=35)
        )
        assert usernames(rows) == ["member2", "member3"]

    async def test_search_team_name(self, db: AsyncSession, members):
        """teamA → member1, member2."""
        rows = await member_repository.search(db, MemberSearchCondition(team_name="teamA"))
        assert usernames(rows) == ["member1", "member2"]
        assert {row.team_name for row in rows} == {"teamA"}

    async def test_search_all_fields(self, db: AsyncSession, members):
        rows = await member_repository.search(
            db,
            MemberSearchCondition(username="member4", team_name="teamB", age_goe=35, age_loe=40),
        )
        assert [(r.username, r.age, r.team_name) for r in rows] == [("member4", 40, "teamB")]

    async def test_empty_condition_returns_all_rows(self, db: AsyncSession, teamless_member):
        rows = await member_repository.search(db, MemberSearchCondition())
        assert usernames(rows) == ["member1", "member2", "member3", "member4", "member5"]

    async def test_contradictory_bounds_return_empty(self, db: AsyncSession, members):
        """하한 > 상한이면 오류 없이 빈 결과."""
        rows = await member_repository.search(
            db, MemberSearchCondition(age_goe=40, age_loe=10)
        )
        assert rows == []

    async def test_blank_strings_do_not_filter(self, db: AsyncSession, members):
        for blank in ("", "   "):
            rows = await member_repository.search(
                db, MemberSearchCondition(username=blank, team_name=blank)
            )
            assert len(rows) == 4

    async def test_outer_join_keeps_member_without_team(self, db: AsyncSession, teamless_member):
        rows = await member_repository.search(db, MemberSearchCondition(username="member5"))
        assert len(rows) == 1
        row = rows[0]
        assert row.member_id == teamless_member.id
        assert row.age == 50
        assert row.team_id is None
        assert row.team_name is None

    async def test_team_filter_excludes_member_without_team(self, db: AsyncSession, teamless_member):
        rows = await member_repository.search(db, MemberSearchCondition(team_name="teamB"))
        assert usernames(rows) == ["member3", "member4"]

    async def test_strategies_agree_for_all_conditions(self, db: AsyncSession, teamless_member):
        """Builder 방식과 where 파라미터 방식의 결과가 항상 같음."""
        for condition in all_conditions():
            by_list = await member_repository.search(db, condition)
            by_builder = await member_repository.search_by_builder(db, condition)
            assert sorted(r.member_id for r in by_list) == sorted(r.member_id for r in by_builder), condition

    async def test_adding_a_field_never_grows_the_result(self, db: AsyncSession, teamless_member):
        base = MemberSearchCondition(age_goe=15)
        base_size = len(await member_repository.search(db, base))
        for extra in (
            {"username": "member2"},
            {"team_name": "teamA"},
            {"age_loe": 30},
            {"team_name": "teamC"},
        ):
            tightened = base.model_copy(update=extra)
            assert len(await member_repository.search(db, tightened)) <= base_size

    async def test_out_of_range_age_bounds(self, db: AsyncSession, members):
        """저장소 정수 범위를 넘는 나이 조건은 오류 없이 결과를 결정."""
        cases = [
            (MemberSearchCondition(age_goe=10**20), []),
            (MemberSearchCondition(age_loe=-(10**20)), []),
            (MemberSearchCondition(age_loe=10**20), ["member1", "member2", "member3", "member4"]),
            (MemberSearchCondition(age_goe=-(10**20)), ["member1", "member2", "member3", "member4"]),
            (MemberSearchCondition(age_goe=-(10**20), age_loe=20), ["member1", "member2"]),
        ]
        for condition, expected in cases:
            assert usernames(await member_repository.search(db, condition)) == expected
            assert usernames(await member_repository.search_by_builder(db, condition)) == expected
            assert await member_repository.count(db, condition) == len(expected)
            assert await member_repository.exists_matching(db, condition) is bool(expected)


class TestFragmentReuse:
    """조건절 재사용 테스트."""

    async def test_find_members_returns_entities(self, db: AsyncSession, members):
        found = await member_repository.find_members(
            db, MemberSearchCondition(team_name="teamB", age_goe=35)
        )
        assert [m.username for m in found] == ["member4"]

    async def test_exists_matching(self, db: AsyncSession, members):
        assert await member_repository.exists_matching(db, MemberSearchCondition(team_name="teamA"))
        assert not await member_repository.exists_matching(db, MemberSearchCondition(username="nobody"))

    async def test_find_by_username(self, db: AsyncSession, members):
        found = await member_repository.find_by_username(db, "member3")
        assert len(found) == 1
        assert found[0].age == 30

    async def test_get_by_id_out_of_range(self, db: AsyncSession, members):
        assert await member_repository.get_by_id(db, members[0].id) is members[0]
        assert await member_repository.get_by_id(db, 10**20) is None
        assert await member_repository.get_by_id(db, -(10**20)) is None

    async def test_get_all(self, db: AsyncSession, teamless_member):
        everyone = await member_repository.get_all(db, order_by=Member.id)
        assert [m.username for m in everyone] == ["member1", "member2", "member3", "member4", "member5"]

        # None 값 필터는 무시 (None-valued filters are skipped)
        filtered = await member_repository.get_all(db, filters={"username": "member2", "team_id": None})
        assert [m.username for m in filtered] == ["member2"]

    async def test_change_team_moves_member_in_search(self, db: AsyncSession, members, teams):
        member1 = members[0]
        member1.change_team(teams["teamB"])
        assert member1.team is teams["teamB"]
        assert member1.team_id == teams["teamB"].id
        await db.commit()

        rows = await member_repository.search(db, MemberSearchCondition(team_name="teamB"))
        assert usernames(rows) == ["member1", "member3", "member4"]


class TestPaging:
    """페이징 및 카운트 전략 테스트."""

    async def test_page_ordered_by_username_desc(self, db: AsyncSession, members):
        """offset=1, limit=2, 회원명 내림차순 → member3, member2 / 전체 4."""
        page_request = PageRequest(
            offset=1, limit=2, sort=(SortOrder("username", SortDirection.DESC),)
        )
        for strategy in CountStrategy:
            page = await member_repository.search_page(
                db, MemberSearchCondition(), page_request, strategy
            )
            assert [row.username for row in page.content] == ["member3", "member2"]
            assert page.total_elements == 4
            assert page.page_size == 2

    async def test_content_length_follows_window(self, db: AsyncSession, teamless_member):
        condition = MemberSearchCondition()
        total = 5
        for offset, limit in itertools.product(range(0, 8), range(1, 6)):
            for strategy in CountStrategy:
                page = await member_repository.search_page(
                    db, condition, PageRequest(offset=offset, limit=limit), strategy
                )
                expected = min(limit, total - offset) if offset < total else 0
                assert len(page.content) == expected, (offset, limit, strategy)
                assert page.total_elements == total

    async def test_offset_past_end_keeps_total(self, db: AsyncSession, members):
        condition = MemberSearchCondition(team_name="teamA")
        for strategy in CountStrategy:
            page = await member_repository.search_page(
                db, condition, PageRequest(offset=10, limit=5), strategy
            )
            assert page.content == []
            assert page.total_elements == 2

    async def test_offset_beyond_storage_range(self, db: AsyncSession, members):
        """바인딩할 수 없는 오프셋은 빈 페이지, 전체 개수는 유지."""
        for strategy in CountStrategy:
            page = await member_repository.search_page(
                db, MemberSearchCondition(), PageRequest(offset=10**20, limit=5), strategy
            )
            assert page.content == []
            assert page.total_elements == 4
            assert page.has_next is False

    async def test_limit_beyond_storage_range(self, db: AsyncSession, members):
        for strategy in CountStrategy:
            page = await member_repository.search_page(
                db, MemberSearchCondition(), PageRequest(limit=10**20), strategy
            )
            assert len(page.content) == 4
            assert page.total_elements == 4

    async def test_empty_filter_result(self, db: AsyncSession, members):
        for strategy in CountStrategy:
            page = await member_repository.search_page(
                db, MemberSearchCondition(username="nobody"), PageRequest(limit=5), strategy
            )
            assert page.content == []
            assert page.total_elements == 0

    async def test_count_strategies_agree(self, db: AsyncSession, teamless_member):
        for condition in all_conditions():
            content, coupled_total = await member_repository.fetch_content_with_total(
                db, condition, PageRequest(limit=2)
            )
            decoupled_total = await member_repository.count(db, condition)
            assert coupled_total == decoupled_total, condition
            assert len(content) <= 2

    async def test_count_joins_teams_only_when_needed(
        self, engine: AsyncEngine, db: AsyncSession, teamless_member
    ):
        statements: list[str] = []

        def capture(conn, cursor, statement, parameters, context, executemany):
            statements.append(statement.upper())

        event.listen(engine.sync_engine, "before_cursor_execute", capture)
        try:
            assert await member_repository.count(db, MemberSearchCondition(age_goe=20)) == 4
            assert await member_repository.count(db, MemberSearchCondition(team_name="teamA")) == 2
        finally:
            event.remove(engine.sync_engine, "before_cursor_execute", capture)

        age_only, team_filtered = [s for s in statements if "COUNT(" in s]
        assert "JOIN" not in age_only
        assert "LEFT OUTER JOIN" in team_filtered
