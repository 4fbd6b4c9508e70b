"""회원 검색 조건절 조합 모듈.

Member search predicate composition.
Turns a ``MemberSearchCondition`` into independent, individually optional
predicate fragments. A fragment whose input is absent (or blank, for
strings) is ``None`` and drops out of every conjunction.

Two ways of applying the fragments are provided and return the same rows:

    - ``where_clauses``: 활성 조건절 목록을 ``Select.where(*clauses)``에 전달
      (fragment list, each passed as its own filter clause)
    - ``accumulate``: ``true()``에서 시작해 조건절을 순서대로 AND 결합
      (accumulator, a single expression built from ``true()``)

All functions are pure; nothing here touches a session.
"""

from dataclasses import dataclass

from sqlalchemy import ColumnElement, and_, false, true

from member_search.models.member import INTEGER_MAX, INTEGER_MIN, Member, Team
from member_search.schemas.member import MemberSearchCondition


@dataclass(frozen=True, eq=False)
class PredicateFragment:
    """독립적으로 평가 가능한 조건절.

    A named boolean condition over the member/team outer join.

    Attributes:
        name: 조건절 이름 (Fragment name, e.g. "username_eq")
        clause: SQLAlchemy 불리언 표현식 (SQLAlchemy boolean expression)
        joined: 팀 엔티티 속성 참조 여부 (Whether the clause reads Team columns)
    """

    name: str
    clause: ColumnElement[bool]
    joined: bool = False

    def and_(self, other: "PredicateFragment | None") -> "PredicateFragment":
        """다른 조건절과 AND 결합합니다. None이면 자기 자신을 반환합니다.

        Conjoin with another fragment; a ``None`` operand leaves this one unchanged.
        """
        if other is None:
            return self
        return PredicateFragment(
            name=f"{self.name}&{other.name}",
            clause=and_(self.clause, other.clause),
            joined=self.joined or other.joined,
        )


def has_text(value: str | None) -> bool:
    """공백이 아닌 문자열인지 확인합니다 (None, "", 공백만 있는 문자열은 False)."""
    return value is not None and value.strip() != ""


def username_eq(username: str | None) -> PredicateFragment | None:
    if not has_text(username):
        return None
    return PredicateFragment("username_eq", Member.username == username)


def team_name_eq(team_name: str | None) -> PredicateFragment | None:
    if not has_text(team_name):
        return None
    return PredicateFragment("team_name_eq", Team.name == team_name, joined=True)


def age_goe(age: int | None) -> PredicateFragment | None:
    """나이 하한 조건 (Minimum age, inclusive).

    Bounds outside the INTEGER column range never reach the driver: above
    the maximum nothing matches, at or below the minimum every row does.
    """
    if age is None or age <= INTEGER_MIN:
        return None
    if age > INTEGER_MAX:
        return PredicateFragment("age_goe", false())
    return PredicateFragment("age_goe", Member.age >= age)


def age_loe(age: int | None) -> PredicateFragment | None:
    """나이 상한 조건 (Maximum age, inclusive). Out-of-range bounds as in ``age_goe``."""
    if age is None or age >= INTEGER_MAX:
        return None
    if age < INTEGER_MIN:
        return PredicateFragment("age_loe", false())
    return PredicateFragment("age_loe", Member.age <= age)


def and_fragments(*fragments: PredicateFragment | None) -> PredicateFragment | None:
    """조건절들을 AND 결합합니다. 모두 None이면 None을 반환합니다.

    Conjoin fragments left to right, skipping ``None``.
    """
    combined: PredicateFragment | None = None
    for fragment in fragments:
        if fragment is None:
            continue
        combined = fragment if combined is None else combined.and_(fragment)
    return combined


def age_between(goe: int | None, loe: int | None) -> PredicateFragment | None:
    """나이 범위 조건 — 조합 가능 (Composed from the two age bounds)."""
    return and_fragments(age_goe(goe), age_loe(loe))


def member_search_fragments(
    condition: MemberSearchCondition,
) -> tuple[PredicateFragment | None, ...]:
    """검색 조건을 필드별 조건절 튜플로 변환합니다.

    Map a condition to one fragment per recognized field, in field order:
    username, team name, minimum age, maximum age. Absent fields map to None.
    """
    return (
        username_eq(condition.username),
        team_name_eq(condition.team_name),
        age_goe(condition.age_goe),
        age_loe(condition.age_loe),
    )


def active_fragments(
    fragments: tuple[PredicateFragment | None, ...],
) -> tuple[PredicateFragment, ...]:
    return tuple(fragment for fragment in fragments if fragment is not None)


def where_clauses(condition: MemberSearchCondition) -> tuple[ColumnElement[bool], ...]:
    """where 파라미터 방식 — 활성 조건절 목록.

    Fragment-list strategy: the active clauses, meant to be passed to
    ``Select.where(*clauses)``. An empty tuple leaves the query unfiltered.
    """
    return tuple(f.clause for f in active_fragments(member_search_fragments(condition)))


def accumulate(condition: MemberSearchCondition) -> ColumnElement[bool]:
    """Builder 방식 — ``true()``에서 시작해 활성 조건절을 차례로 AND 결합.

    Accumulator strategy: a single expression that starts from ``true()``
    and conjoins each active fragment in turn.
    """
    predicate: ColumnElement[bool] = true()
    for fragment in active_fragments(member_search_fragments(condition)):
        predicate = and_(predicate, fragment.clause)
    return predicate


def requires_team_join(fragments: tuple[PredicateFragment | None, ...]) -> bool:
    """팀 조인이 필요한 조건절이 있는지 확인합니다.

    True when any active fragment reads Team columns. The count query may
    skip the join only when this is False.
    """
    return any(f.joined for f in active_fragments(fragments))
