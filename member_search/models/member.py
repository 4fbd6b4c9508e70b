"""팀 및 회원 SQLAlchemy ORM 모델 정의.

Team and Member SQLAlchemy ORM model definitions.
A member belongs to at most one team; a team has many members.

Tables:
    - teams: 팀 (Teams, unique name)
    - members: 회원 (Members, optional team FK)
"""

from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from member_search.database import Base

# INTEGER 컬럼 값 범위 — Value range of a 32-bit INTEGER column (PostgreSQL INTEGER)
INTEGER_MIN: int = -(2**31)
INTEGER_MAX: int = 2**31 - 1


class Team(Base):
    """팀 모델.

    Team model — the related side of the member search outer join.

    Attributes:
        id: 고유 식별자 (Auto-increment identifier)
        name: 팀 이름 (Team name, unique)

    Relationships:
        members: 소속 회원 목록 (Members of this team)
    """

    __tablename__ = "teams"

    # 팀 고유 식별자 — Team identifier (auto-increment)
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # 팀 이름 — Team display name (unique)
    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)

    # 관계 — Relationships
    members = relationship("Member", back_populates="team")

    def __repr__(self) -> str:
        return f"Team(id={self.id!r}, name={self.name!r})"


class Member(Base):
    """회원 모델 — 검색의 기본 엔티티.

    Member model — the primary entity of the member search.
    ``team_id`` is nullable: a member without a team still shows up in
    searches, with empty team fields.

    Attributes:
        id: 고유 식별자 (Auto-increment identifier)
        username: 회원명 (Member name, not unique)
        age: 나이 (Age)
        team_id: 소속 팀 FK, 없을 수 있음 (Optional team foreign key)

    Relationships:
        team: 소속 팀 (Owning team, may be None)
    """

    __tablename__ = "members"

    # 회원 고유 식별자 — Member identifier (auto-increment)
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # 회원명 — Member name
    username: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    # 나이 — Age
    age: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    # 팀 FK — Team (SET NULL: 팀 삭제 시 회원은 팀 없이 남음)
    team_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("teams.id", ondelete="SET NULL"), nullable=True
    )

    # 관계 — Relationships
    team = relationship("Team", back_populates="members")

    def change_team(self, team: Team) -> None:
        """회원의 팀을 변경합니다.

        Move the member to another team. Both the relationship and the
        foreign key are set, so an already loaded ``team`` reflects the move
        before the next flush.
        """
        self.team = team
        self.team_id = team.id

    def __repr__(self) -> str:
        return f"Member(id={self.id!r}, username={self.username!r}, age={self.age!r})"
