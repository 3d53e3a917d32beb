import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from typing import List
from app import config
from app.db import get_db
from app.models.points import Achievement, Referral, UserAchievement, UserPoints
from app.models.profile import Profile
from app.schemas.points import (
    AchievementResponse,
    LeaderboardEntry,
    PointsResponse,
    ReferralCreate,
    ReferralResponse,
    UserAchievementResponse,
)
from app.utils.auth import SessionContext, get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(tags=["points"])


def get_or_create_balance(db: Session, user_id: str) -> UserPoints:
    """Every user starts with the initial points grant on first access."""
    balance = db.query(UserPoints).filter(UserPoints.user_id == user_id).first()
    if balance is None:
        balance = UserPoints(user_id=user_id, points=config.INITIAL_POINTS)
        db.add(balance)
        db.commit()
        db.refresh(balance)
        logger.debug(f"Created points balance for user {user_id} with {config.INITIAL_POINTS} points")
    return balance


def award_achievements(db: Session, user_id: str, points: int) -> None:
    earned = {
        ua.achievement_id
        for ua in db.query(UserAchievement).filter(UserAchievement.user_id == user_id).all()
    }
    reached = db.query(Achievement).filter(Achievement.points_required <= points).all()
    new = [a for a in reached if a.id not in earned]
    for achievement in new:
        db.add(UserAchievement(user_id=user_id, achievement_id=achievement.id))
        logger.debug(f"User {user_id} earned achievement {achievement.name}")
    if new:
        db.commit()


@router.get("/points/me", response_model=PointsResponse)
def get_my_points(db: Session = Depends(get_db), current_user: SessionContext = Depends(get_current_user)):
    balance = get_or_create_balance(db, current_user.id)
    award_achievements(db, current_user.id, balance.points)
    return balance


@router.get("/points/me/achievements", response_model=List[UserAchievementResponse])
def get_my_achievements(db: Session = Depends(get_db), current_user: SessionContext = Depends(get_current_user)):
    balance = get_or_create_balance(db, current_user.id)
    award_achievements(db, current_user.id, balance.points)
    return (
        db.query(UserAchievement)
        .filter(UserAchievement.user_id == current_user.id)
        .order_by(UserAchievement.earned_at)
        .all()
    )


@router.get("/points/leaderboard", response_model=List[LeaderboardEntry])
def get_leaderboard(db: Session = Depends(get_db)):
    rows = (
        db.query(UserPoints, Profile.username)
        .outerjoin(Profile, Profile.id == UserPoints.user_id)
        .order_by(UserPoints.points.desc())
        .limit(config.LEADERBOARD_SIZE)
        .all()
    )
    return [
        LeaderboardEntry(rank=rank, user_id=balance.user_id, username=username, points=balance.points)
        for rank, (balance, username) in enumerate(rows, start=1)
    ]


@router.get("/achievements", response_model=List[AchievementResponse])
def get_achievements(db: Session = Depends(get_db)):
    return db.query(Achievement).order_by(Achievement.points_required).all()


@router.post("/points/referrals", response_model=ReferralResponse, status_code=status.HTTP_201_CREATED)
def create_referral(
    referral: ReferralCreate,
    db: Session = Depends(get_db),
    current_user: SessionContext = Depends(get_current_user),
):
    """
    Record that the caller referred another user and award the referral bonus.
    Each user can only be referred once.
    """
    if referral.referred_id == current_user.id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="You cannot refer yourself")

    balance = get_or_create_balance(db, current_user.id)
    db_referral = Referral(
        referrer_id=current_user.id,
        referred_id=referral.referred_id,
        points_awarded=config.REFERRAL_POINTS,
    )
    db.add(db_referral)
    balance.points += config.REFERRAL_POINTS
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.error(f"User {referral.referred_id} was already referred")
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="This user has already been referred")
    db.refresh(db_referral)
    logger.debug(f"User {current_user.id} referred {referral.referred_id}, +{config.REFERRAL_POINTS} points")
    return db_referral
