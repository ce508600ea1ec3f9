import secrets

from fastapi import APIRouter, Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import admin_api_token
from ..db import get_session
from ..exceptions import ProblemDetail, http_problem
from ..schemas import ReversalOut
from ..services import reverse_match
from .matches import to_warning_out

router = APIRouter(
    prefix="/admin", tags=["admin"], responses={403: {"model": ProblemDetail}}
)


async def require_admin(x_admin_token: str | None = Header(default=None)) -> None:
    expected = admin_api_token()
    if not expected or not x_admin_token or not secrets.compare_digest(
        expected, x_admin_token
    ):
        raise http_problem(
            status_code=403,
            detail="forbidden",
            code="admin_forbidden",
        )


# POST /api/v0/admin/matches/{mid}/reset
@router.post(
    "/matches/{mid}/reset",
    response_model=ReversalOut,
    dependencies=[Depends(require_admin)],
)
async def reset_match(mid: str, session: AsyncSession = Depends(get_session)):
    report = await reverse_match(session, mid)
    return ReversalOut(
        match_id=report.match_id,
        summary=report.summary,
        reversed_entries=report.reversed_entries,
        skipped_entries=report.skipped_entries,
        purged=report.purged,
        warnings=[to_warning_out(w) for w in report.warnings],
    )
