from fastapi import APIRouter, Depends

from ..deps import get_directory, optional_actor
from ..schemas import Gender, ProfileCreate, ProfileUpdate, UserProfile
from ..services.directory import ProfileDirectory

router = APIRouter()


@router.get("/profiles", response_model=list[UserProfile])
def browse_profiles(
    location: str | None = None,
    min_age: int | None = None,
    max_age: int | None = None,
    budget_min: float | None = None,
    budget_max: float | None = None,
    preferred_gender: Gender | None = None,
    viewer_id: int | None = Depends(optional_actor),
    directory: ProfileDirectory = Depends(get_directory),
) -> list[UserProfile]:
    filters = {
        "location": location,
        "min_age": min_age,
        "max_age": max_age,
        "budget_min": budget_min,
        "budget_max": budget_max,
        "preferred_gender": preferred_gender,
    }
    return directory.list_candidates(viewer_id, filters)


@router.post("/profiles", response_model=UserProfile, status_code=201)
def create_profile(payload: ProfileCreate, directory: ProfileDirectory = Depends(get_directory)) -> UserProfile:
    return directory.create_profile(payload)


@router.get("/profiles/{profile_id}", response_model=UserProfile)
def get_profile(profile_id: int, directory: ProfileDirectory = Depends(get_directory)) -> UserProfile:
    return directory.get_profile(profile_id)


@router.patch("/profiles/{profile_id}", response_model=UserProfile)
def update_profile(
    profile_id: int,
    payload: ProfileUpdate,
    directory: ProfileDirectory = Depends(get_directory),
) -> UserProfile:
    return directory.update_profile(profile_id, payload)
