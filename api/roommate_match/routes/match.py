from fastapi import APIRouter, Depends

from ..deps import get_engine
from ..schemas import MatchView
from ..services.engine import InterestEngine

router = APIRouter()


@router.get("/users/{user_id}/matches", response_model=list[MatchView])
def list_matches(user_id: int, engine: InterestEngine = Depends(get_engine)) -> list[MatchView]:
    return engine.list_matches(user_id)
