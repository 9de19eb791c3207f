"""
Poke endpoints.

Vendors poke candidate profiles, candidates poke job postings. Each send
counts against the sender's monthly plan limit.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_current_user, get_quota_counter
from api.schemas.pokes import PokeCreate, PokeResponse, PokeSendResponse
from api.services import pokes as poke_service
from core.quotas import MonthlyQuotaCounter
from core.security import AuthenticatedUser
from database.engine import get_db

router = APIRouter()


@router.post(
    "",
    response_model=PokeSendResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Send Poke",
    description="Record a poke. 409 if this target was already poked the same way, 429 when the monthly limit is reached.",
)
async def send_poke(
    body: PokeCreate,
    current_user: AuthenticatedUser = Depends(get_current_user),
    quotas: MonthlyQuotaCounter = Depends(get_quota_counter),
    db: AsyncSession = Depends(get_db),
):
    poke, grant = await poke_service.send_poke(db, quotas, current_user, body)
    return PokeSendResponse(
        poke=PokeResponse.model_validate(poke),
        used=grant.used,
        limit=grant.limit,
        remaining=grant.remaining,
    )


@router.get("/sent", response_model=list[PokeResponse], summary="Sent Pokes")
async def sent_pokes(
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    pokes = await poke_service.list_sent_pokes(db, current_user.user_id)
    return [PokeResponse.model_validate(p) for p in pokes]


@router.get("/received", response_model=list[PokeResponse], summary="Received Pokes")
async def received_pokes(
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    pokes = await poke_service.list_received_pokes(db, current_user)
    return [PokeResponse.model_validate(p) for p in pokes]
