"""회원 검색 관련 Pydantic 요청/응답 스키마 정의.

Member search Pydantic request/response schema definitions.
Covers the search condition (sparse optional filters), the flattened
member+team projection returned by searches, and team/member creation.
"""

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from member_search.models.member import INTEGER_MAX


# === 검색 조건 (Search condition) 스키마 ===

class MemberSearchCondition(BaseModel):
    """회원 검색 조건 — 회원명, 팀명, 나이(ageGoe, ageLoe).

    Member search condition with optional filter fields.
    Any subset of fields (including none) is valid; an absent field imposes
    no constraint. Blank strings are treated the same as absent ones by the
    predicate composer. Instances are immutable.

    Attributes:
        username: 회원명 일치 (Exact member name, optional)
        team_name: 팀명 일치 (Exact team name, optional)
        age_goe: 나이 하한, 이상 (Minimum age inclusive, optional)
        age_loe: 나이 상한, 이하 (Maximum age inclusive, optional)
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    username: str | None = Field(
        default=None, validation_alias=AliasChoices("username", "usernameEquals")
    )
    team_name: str | None = Field(
        default=None, validation_alias=AliasChoices("team_name", "teamName", "teamNameEquals")
    )
    age_goe: int | None = Field(
        default=None, validation_alias=AliasChoices("age_goe", "ageGoe", "ageGreaterOrEqual")
    )
    age_loe: int | None = Field(
        default=None, validation_alias=AliasChoices("age_loe", "ageLoe", "ageLessOrEqual")
    )


# === 검색 결과 (Projection) 스키마 ===

class MemberTeamDto(BaseModel):
    """회원+팀 평탄화 조회 결과.

    Flattened member + team row returned by searches.
    Built from the projected columns only; never persisted. Team fields
    are None for members without a team (outer join).
    """

    member_id: int
    username: str
    age: int
    team_id: int | None = None
    team_name: str | None = None


# === 팀/회원 생성 (Team/Member creation) 스키마 ===

class TeamCreate(BaseModel):
    """팀 생성 요청 스키마."""

    name: str = Field(min_length=1, max_length=100)


class TeamResponse(BaseModel):
    """팀 응답 스키마."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str


class MemberCreate(BaseModel):
    """회원 생성 요청 스키마.

    Member creation request schema.

    Attributes:
        username: 회원명 (Member name)
        age: 나이 (Age, non-negative)
        team_id: 소속 팀 ID (Team identifier, optional)
    """

    username: str = Field(min_length=1, max_length=100)
    age: int = Field(default=0, ge=0, le=INTEGER_MAX)
    team_id: int | None = None


class MemberResponse(BaseModel):
    """회원 응답 스키마."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    age: int
    team_id: int | None = None
