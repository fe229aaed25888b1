from fastapi import Header, HTTPException, Request

from .services.directory import ProfileDirectory
from .services.engine import InterestEngine


def parse_actor_user_id(raw_actor_user_id: str | None) -> int | None:
    if not raw_actor_user_id:
        return None
    value = raw_actor_user_id.strip()
    if not value:
        return None
    try:
        return int(value)
    except ValueError:
        raise HTTPException(status_code=400, detail="X-Actor-User-Id must be an integer user id")


def optional_actor(x_actor_user_id: str | None = Header(default=None)) -> int | None:
    return parse_actor_user_id(x_actor_user_id)


def require_actor(x_actor_user_id: str | None = Header(default=None)) -> int:
    actor = parse_actor_user_id(x_actor_user_id)
    if actor is None:
        raise HTTPException(status_code=400, detail="X-Actor-User-Id header is required")
    return actor


def get_directory(request: Request) -> ProfileDirectory:
    return request.app.state.directory


def get_engine(request: Request) -> InterestEngine:
    return request.app.state.engine
