from fastapi import APIRouter, Depends

from ..config import RL_INTEREST_CREATE_LIMIT, RL_INTEREST_RESPOND_LIMIT, RL_WINDOW_SECONDS
from ..deps import get_engine, require_actor
from ..schemas import Direction, Interest, InterestCreateRequest, InterestRespondRequest, InterestView, RespondResult
from ..services.engine import InterestEngine
from ..services.rate_limit import throttle

router = APIRouter()

RL_INTEREST_CREATE = throttle("interest_create", RL_INTEREST_CREATE_LIMIT, RL_WINDOW_SECONDS)
RL_INTEREST_RESPOND = throttle("interest_respond", RL_INTEREST_RESPOND_LIMIT, RL_WINDOW_SECONDS)


@router.post("/interests", response_model=Interest, status_code=201, dependencies=[RL_INTEREST_CREATE])
def express_interest(
    payload: InterestCreateRequest,
    requester_id: int = Depends(require_actor),
    engine: InterestEngine = Depends(get_engine),
) -> Interest:
    return engine.create_interest(requester_id, payload.target_id, payload.message)


@router.post("/interests/{interest_id}/respond", response_model=RespondResult, dependencies=[RL_INTEREST_RESPOND])
def respond_to_interest(
    interest_id: int,
    payload: InterestRespondRequest,
    responder_id: int = Depends(require_actor),
    engine: InterestEngine = Depends(get_engine),
) -> RespondResult:
    return engine.respond_to_interest(interest_id, responder_id, payload.status)


@router.get("/users/{user_id}/interests", response_model=list[InterestView])
def list_interests(
    user_id: int,
    direction: Direction | None = None,
    engine: InterestEngine = Depends(get_engine),
) -> list[InterestView]:
    return engine.list_interests(user_id, direction)
