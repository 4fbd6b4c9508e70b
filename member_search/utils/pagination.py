"""페이지네이션 유틸리티 모듈.

Pagination utility module.
Provides the page request (offset/limit/sort), the count strategy switch,
and the generic Page response model shared by the repository, service and
API layers.
"""

import enum
import math
from dataclasses import dataclass, field
from typing import Any, Generic, Iterable, Sequence, TypeVar

from pydantic import BaseModel, computed_field

from member_search.utils.exceptions import BadRequestError

T = TypeVar("T")

# OFFSET/LIMIT에 바인딩 가능한 최대값 — Largest value bindable to OFFSET/LIMIT (64-bit)
ROW_BOUND_MAX: int = 2**63 - 1


class CountStrategy(str, enum.Enum):
    """전체 개수 계산 전략.

    How ``total_elements`` is resolved for a page.

    COUPLED: 내용과 개수를 한 번의 쿼리로 조회 (content and count in one round trip)
    DECOUPLED: 개수를 별도 쿼리로 조회, 필요 없으면 조인 생략
               (separate count query that skips the join when it can)
    """

    COUPLED = "coupled"
    DECOUPLED = "decoupled"


class SortDirection(str, enum.Enum):
    """정렬 방향 — Sort direction."""

    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True)
class SortOrder:
    """단일 정렬 조건 — One sort key.

    Attributes:
        property: 정렬 대상 속성명 (Projected property name, e.g. "username")
        direction: 정렬 방향 (Sort direction)
    """

    property: str
    direction: SortDirection = SortDirection.ASC

    @classmethod
    def parse(cls, raw: str) -> "SortOrder":
        """``"username,desc"`` 형식의 문자열을 파싱합니다.

        Parse a ``property[,asc|desc]`` string as sent in query parameters.

        Raises:
            BadRequestError: 방향 값이 잘못된 경우 (Unknown direction)
        """
        name, _, direction = raw.partition(",")
        direction = direction.strip().lower() or SortDirection.ASC.value
        try:
            return cls(property=name.strip(), direction=SortDirection(direction))
        except ValueError:
            raise BadRequestError(f"Invalid sort direction: {direction!r}") from None


@dataclass(frozen=True)
class PageRequest:
    """페이지 요청 — 오프셋, 크기, 정렬.

    Page window request. Construction does not validate; call
    ``validate_page_request`` before any I/O.

    Attributes:
        offset: 건너뛸 행 수 (Rows to skip, >= 0)
        limit: 페이지 크기 (Page size, > 0)
        sort: 정렬 조건 목록, 비어있으면 저장소의 기본 순서
              (Sort keys; empty means the store's natural order)
    """

    offset: int = 0
    limit: int = 20
    sort: tuple[SortOrder, ...] = field(default_factory=tuple)

    @classmethod
    def of(cls, page: int, size: int, *sort: SortOrder) -> "PageRequest":
        """0부터 시작하는 페이지 번호로 요청을 생성합니다.

        Build a request from a 0-based page number and a page size.
        """
        return cls(offset=page * size, limit=size, sort=tuple(sort))

    @property
    def page_index(self) -> int:
        """현재 페이지 번호, 0부터 시작 (Current page number, 0-based)."""
        return self.offset // self.limit if self.limit > 0 else 0

    @property
    def past_row_bound(self) -> bool:
        """저장소가 표현할 수 없는 오프셋인지 여부.

        True when the offset cannot be bound to the store. No row sits that
        far in, so the page is empty while the total is still counted.
        """
        return self.offset > ROW_BOUND_MAX


def validate_page_request(page: PageRequest, sortable: Iterable[str] = ()) -> None:
    """페이지 요청을 검증합니다 — I/O 이전에 호출해야 합니다.

    Validate a page request before any query runs.

    Args:
        page: 검증할 페이지 요청 (Page request to validate)
        sortable: 허용된 정렬 속성명 (Allowed sort property names)

    Raises:
        BadRequestError: limit <= 0, offset < 0, 또는 알 수 없는 정렬 속성
                         (Non-positive limit, negative offset, or unknown sort property)
    """
    if page.limit <= 0:
        raise BadRequestError(f"Page limit must be greater than 0, got {page.limit}")
    if page.offset < 0:
        raise BadRequestError(f"Page offset must not be negative, got {page.offset}")

    allowed: set[str] = set(sortable)
    for order in page.sort:
        if order.property not in allowed:
            raise BadRequestError(f"Unknown sort property: {order.property!r}")


class Page(BaseModel, Generic[T]):
    """페이지네이션 결과 모델.

    Pagination result model for typed responses.
    ``total_elements`` covers the whole filtered set, not just this page.

    Attributes:
        content: 현재 페이지 항목 목록 (Items for the current page)
        total_elements: 전체 항목 수 (Total count across all pages)
        page_index: 현재 페이지 번호, 0부터 시작 (Current page number, 0-based)
        page_size: 페이지당 항목 수 (Items per page)
        offset: 요청 오프셋 (Requested row offset)
    """

    content: list[T]
    total_elements: int
    page_index: int
    page_size: int
    offset: int = 0

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_pages(self) -> int:
        """전체 페이지 수 — ceil(total/page_size)."""
        return math.ceil(self.total_elements / self.page_size) if self.page_size else 0

    @computed_field  # type: ignore[prop-decorator]
    @property
    def has_next(self) -> bool:
        """다음 페이지 존재 여부 (Whether rows exist past this page)."""
        return self.offset + len(self.content) < self.total_elements

    @classmethod
    def of(cls, content: Sequence[Any], page: PageRequest, total: int) -> "Page[Any]":
        """내용, 요청, 전체 개수로 페이지를 생성합니다.

        Build a page from fetched content, its request and the total count.
        """
        return cls(
            content=list(content),
            total_elements=total,
            page_index=page.page_index,
            page_size=page.limit,
            offset=page.offset,
        )
