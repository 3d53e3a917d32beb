import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List
from app.db import get_db
from app.models.testimonial import Testimonial
from app.schemas.testimonial import TestimonialCreate, TestimonialResponse
from app.utils.auth import SessionContext, get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/testimonials",
    tags=["testimonials"],
)


@router.get("/", response_model=List[TestimonialResponse])
def get_testimonials(skip: int = 0, limit: int = 20, db: Session = Depends(get_db)):
    """
    Retrieve site testimonials, newest first.
    """
    return db.query(Testimonial).order_by(Testimonial.created_at.desc()).offset(skip).limit(limit).all()


@router.post("/", response_model=TestimonialResponse, status_code=status.HTTP_201_CREATED)
def create_testimonial(
    testimonial: TestimonialCreate,
    db: Session = Depends(get_db),
    current_user: SessionContext = Depends(get_current_user),
):
    db_testimonial = Testimonial(user_id=current_user.id, **testimonial.model_dump())
    db.add(db_testimonial)
    db.commit()
    db.refresh(db_testimonial)
    logger.debug(f"Created testimonial {db_testimonial.id} by user {current_user.id}")
    return db_testimonial


@router.delete("/{testimonial_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_testimonial(
    testimonial_id: str,
    db: Session = Depends(get_db),
    current_user: SessionContext = Depends(get_current_user),
):
    testimonial = db.query(Testimonial).filter(Testimonial.id == testimonial_id).first()
    if not testimonial:
        logger.error(f"Testimonial not found: {testimonial_id}")
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Testimonial not found")
    if testimonial.user_id != current_user.id and not current_user.is_admin:
        logger.error(f"User {current_user.id} not authorized to delete testimonial {testimonial_id}")
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized to delete this testimonial")
    db.delete(testimonial)
    db.commit()
    logger.debug(f"Deleted testimonial {testimonial_id}")
    return None
