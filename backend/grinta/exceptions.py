from fastapi import HTTPException
from pydantic import BaseModel
from typing import Optional


class ProblemDetail(BaseModel):
    """RFC 7807 compliant error response."""

    type: str = "about:blank"
    title: str
    detail: Optional[str] = None
    status: int
    instance: Optional[str] = None
    code: str


class DomainException(Exception):
    """Base class for domain-specific exceptions."""

    def __init__(
        self,
        status_code: int,
        title: str,
        *,
        code: str,
        detail: str | None = None,
        type_: str = "about:blank",
    ) -> None:
        super().__init__(detail or title)
        self.status_code = status_code
        self.title = title
        self.detail = detail
        self.type = type_
        self.code = code


class MatchNotFound(DomainException):
    def __init__(self, match_id: str) -> None:
        super().__init__(
            status_code=404,
            title="Match not found",
            detail=f"match '{match_id}' not found",
            code="match_not_found",
        )
        self.match_id = match_id


class IncompleteScore(DomainException):
    """Settlement was attempted before both scores were recorded."""

    def __init__(self, match_id: str) -> None:
        super().__init__(
            status_code=409,
            title="Incomplete score",
            detail=f"match '{match_id}' needs both scores before settlement",
            code="match_score_incomplete",
        )
        self.match_id = match_id


class MatchAlreadySettled(DomainException):
    def __init__(self, match_id: str) -> None:
        super().__init__(
            status_code=409,
            title="Match already settled",
            detail=f"match '{match_id}' was already settled; reset it first",
            code="match_already_settled",
        )
        self.match_id = match_id


class InvalidMatchData(DomainException):
    def __init__(self, detail: str) -> None:
        super().__init__(
            status_code=422,
            title="Invalid match data",
            detail=detail,
            code="match_data_invalid",
        )


class BaseRatingError(Exception):
    """Raised by a base rating function that could not apply a result."""


def http_problem(
    status_code: int,
    detail: str,
    code: str,
    *,
    headers: Optional[dict[str, str]] = None,
) -> HTTPException:
    """Create an HTTPException with an attached problem code."""

    exc = HTTPException(status_code=status_code, detail=detail, headers=headers)
    setattr(exc, "code", code)
    return exc
