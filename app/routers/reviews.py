import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List
from app.db import get_db
from app.models.review import Review, ReviewReply
from app.routers.turfs import get_turf_or_404
from app.schemas.review import ReplyCreate, ReplyResponse, ReviewCreate, ReviewResponse
from app.utils.auth import SessionContext, get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(tags=["reviews"])


def running_average(current: float, count: int, new_rating: int) -> float:
    return round((current * count + new_rating) / (count + 1), 2)


def get_review_or_404(db: Session, review_id: str) -> Review:
    review = db.query(Review).filter(Review.id == review_id).first()
    if not review:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Review not found")
    return review


@router.get("/turfs/{turf_id}/reviews", response_model=List[ReviewResponse])
def get_turf_reviews(turf_id: str, db: Session = Depends(get_db)):
    get_turf_or_404(db, turf_id)
    return (
        db.query(Review)
        .filter(Review.turf_id == turf_id)
        .order_by(Review.created_at.desc())
        .all()
    )


@router.post("/turfs/{turf_id}/reviews", response_model=ReviewResponse, status_code=status.HTTP_201_CREATED)
def create_review(
    turf_id: str,
    review: ReviewCreate,
    db: Session = Depends(get_db),
    current_user: SessionContext = Depends(get_current_user),
):
    """
    Review a turf and fold the rating into the turf's average.
    Any authenticated user may review any turf.
    """
    turf = get_turf_or_404(db, turf_id)
    db_review = Review(turf_id=turf.id, user_id=current_user.id, **review.model_dump())
    db.add(db_review)

    turf.rating = running_average(turf.rating or 0, turf.reviews or 0, review.rating)
    turf.reviews = (turf.reviews or 0) + 1

    db.commit()
    db.refresh(db_review)
    logger.debug(f"Created review {db_review.id} for turf {turf_id}, new rating {turf.rating}")
    return db_review


@router.delete("/reviews/{review_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_review(
    review_id: str,
    db: Session = Depends(get_db),
    current_user: SessionContext = Depends(get_current_user),
):
    review = get_review_or_404(db, review_id)
    if review.user_id != current_user.id and not current_user.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized to delete this review")

    turf = review.turf
    remaining = (turf.reviews or 0) - 1
    if remaining > 0:
        turf.rating = round(((turf.rating or 0) * turf.reviews - review.rating) / remaining, 2)
    else:
        turf.rating = 0
    turf.reviews = max(remaining, 0)

    db.delete(review)
    db.commit()
    logger.debug(f"Deleted review {review_id}")
    return None


@router.post("/reviews/{review_id}/replies", response_model=ReplyResponse, status_code=status.HTTP_201_CREATED)
def create_reply(
    review_id: str,
    reply: ReplyCreate,
    db: Session = Depends(get_db),
    current_user: SessionContext = Depends(get_current_user),
):
    get_review_or_404(db, review_id)
    db_reply = ReviewReply(review_id=review_id, user_id=current_user.id, comment=reply.comment)
    db.add(db_reply)
    db.commit()
    db.refresh(db_reply)
    return db_reply


@router.delete("/replies/{reply_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_reply(
    reply_id: str,
    db: Session = Depends(get_db),
    current_user: SessionContext = Depends(get_current_user),
):
    reply = db.query(ReviewReply).filter(ReviewReply.id == reply_id).first()
    if not reply:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Reply not found")
    if reply.user_id != current_user.id and not current_user.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized to delete this reply")
    db.delete(reply)
    db.commit()
    return None
