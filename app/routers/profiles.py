import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from app.db import get_db
from app.models.profile import Profile
from app.schemas.profile import ProfileResponse, ProfileUpdate
from app.utils.auth import SessionContext, get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/profiles",
    tags=["profiles"],
)


def get_or_create_profile(db: Session, user_id: str) -> Profile:
    profile = db.query(Profile).filter(Profile.id == user_id).first()
    if profile is None:
        profile = Profile(id=user_id)
        db.add(profile)
        db.commit()
        db.refresh(profile)
        logger.debug(f"Created profile for user {user_id}")
    return profile


def to_response(profile: Profile, current_user: SessionContext) -> ProfileResponse:
    return ProfileResponse(
        id=profile.id,
        username=profile.username,
        full_name=profile.full_name,
        avatar_url=profile.avatar_url,
        email=current_user.email,
    )


@router.get("/me", response_model=ProfileResponse)
def get_my_profile(db: Session = Depends(get_db), current_user: SessionContext = Depends(get_current_user)):
    return to_response(get_or_create_profile(db, current_user.id), current_user)


@router.put("/me", response_model=ProfileResponse)
def update_my_profile(
    profile_update: ProfileUpdate,
    db: Session = Depends(get_db),
    current_user: SessionContext = Depends(get_current_user),
):
    profile = get_or_create_profile(db, current_user.id)
    for key, value in profile_update.model_dump(exclude_unset=True).items():
        setattr(profile, key, value)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.error(f"Username {profile_update.username!r} already taken")
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Username already taken")
    db.refresh(profile)
    logger.debug(f"Updated profile for user {current_user.id}")
    return to_response(profile, current_user)
