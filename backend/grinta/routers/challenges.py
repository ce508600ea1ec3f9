from fastapi import APIRouter

from ..schemas import ChallengeDefinitionOut
from ..services.challenges import catalog

router = APIRouter(prefix="/challenges", tags=["challenges"])


@router.get("/catalog", response_model=list[ChallengeDefinitionOut])
async def get_catalog():
    return [
        ChallengeDefinitionOut(
            type=d.type,
            title=d.title,
            description=d.description,
            icon=d.icon,
            automatic=d.automatic,
        )
        for d in catalog()
    ]
