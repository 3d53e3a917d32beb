import logging
from fastapi import APIRouter, Depends, HTTPException, status
from datetime import date
from sqlalchemy import func, or_
from sqlalchemy.orm import Session
from typing import List, Optional
from app.db import get_db
from app.models.booking import Booking
from app.models.turf import Turf
from app.schemas.booking import BookingResponse
from app.schemas.turf import TurfCreate, TurfUpdate, TurfResponse, TurfStatsResponse
from app.utils.auth import SessionContext, get_current_user, require_admin

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/turfs",
    tags=["turfs"],
)


def get_turf_or_404(db: Session, turf_id: str) -> Turf:
    turf = db.query(Turf).filter(Turf.id == turf_id).first()
    if not turf:
        logger.error(f"Turf not found: {turf_id}")
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Turf not found")
    return turf


def check_turf_manager(turf: Turf, current_user: SessionContext):
    """Admins manage the turfs they own; unowned turfs are open to any admin."""
    if turf.owner_id not in (None, current_user.id):
        logger.error(f"User {current_user.id} does not own turf {turf.id}")
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized to manage this turf")


@router.post("/", response_model=TurfResponse, status_code=status.HTTP_201_CREATED)
def create_turf(turf: TurfCreate, db: Session = Depends(get_db), current_user: SessionContext = Depends(require_admin)):
    """
    Create a new turf listing owned by the caller.
    Requires an administrator.
    """
    db_turf = Turf(**turf.model_dump(), owner_id=current_user.id)
    db.add(db_turf)
    db.commit()
    db.refresh(db_turf)
    logger.debug(f"Created turf: {db_turf.id}")
    return db_turf


@router.get("/", response_model=List[TurfResponse])
def get_turfs(search: Optional[str] = None, skip: int = 0, limit: int = 100, db: Session = Depends(get_db)):
    """
    Retrieve turf listings, optionally filtered by name or location.
    """
    query = db.query(Turf)
    if search:
        pattern = f"%{search}%"
        query = query.filter(or_(Turf.name.ilike(pattern), Turf.location.ilike(pattern)))
    return query.order_by(Turf.name).offset(skip).limit(limit).all()


@router.get("/mine", response_model=List[TurfResponse])
def get_my_turfs(db: Session = Depends(get_db), current_user: SessionContext = Depends(require_admin)):
    return db.query(Turf).filter(Turf.owner_id == current_user.id).order_by(Turf.name).all()


@router.get("/stats", response_model=TurfStatsResponse)
def get_booking_stats(db: Session = Depends(get_db), current_user: SessionContext = Depends(require_admin)):
    """
    Site-wide booking figures for the admin dashboard.

    - **total_bookings**: every booking, cancelled ones included.
    - **active_bookings**: confirmed bookings from today onwards.
    - **total_revenue**: sum of `total_price` over bookings that are not cancelled.
    - **recent_bookings**: the five most recently created bookings.
    """
    total_bookings = db.query(func.count(Booking.id)).scalar()
    active_bookings = (
        db.query(func.count(Booking.id))
        .filter(Booking.status == "confirmed", Booking.booking_date >= date.today())
        .scalar()
    )
    total_revenue = (
        db.query(func.coalesce(func.sum(Booking.total_price), 0))
        .filter(Booking.status != "cancelled")
        .scalar()
    )
    recent_bookings = db.query(Booking).order_by(Booking.created_at.desc()).limit(5).all()
    logger.debug(f"Admin {current_user.id} read stats: {total_bookings} bookings, revenue {total_revenue}")
    return TurfStatsResponse(
        total_bookings=total_bookings,
        active_bookings=active_bookings,
        total_revenue=total_revenue,
        recent_bookings=[BookingResponse.model_validate(b) for b in recent_bookings],
    )


@router.get("/{turf_id}", response_model=TurfResponse)
def get_turf(turf_id: str, db: Session = Depends(get_db)):
    return get_turf_or_404(db, turf_id)


@router.put("/{turf_id}", response_model=TurfResponse)
def update_turf(turf_id: str, turf_update: TurfUpdate, db: Session = Depends(get_db), current_user: SessionContext = Depends(require_admin)):
    """
    Update a turf's details.
    Requires an administrator who owns the turf.
    """
    db_turf = get_turf_or_404(db, turf_id)
    check_turf_manager(db_turf, current_user)

    update_data = turf_update.model_dump(exclude_unset=True)
    for key, value in update_data.items():
        setattr(db_turf, key, value)

    db.commit()
    db.refresh(db_turf)
    logger.debug(f"Updated turf: {turf_id}")
    return db_turf


@router.delete("/{turf_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_turf(turf_id: str, db: Session = Depends(get_db), current_user: SessionContext = Depends(require_admin)):
    """
    Delete a turf together with its bookings and reviews.
    Requires an administrator who owns the turf.
    """
    db_turf = get_turf_or_404(db, turf_id)
    check_turf_manager(db_turf, current_user)

    db.delete(db_turf)
    db.commit()
    logger.debug(f"Deleted turf: {turf_id}")
    return None


@router.get("/{turf_id}/bookings", response_model=List[BookingResponse])
def get_turf_bookings(turf_id: str, db: Session = Depends(get_db), current_user: SessionContext = Depends(get_current_user)):
    """
    List every booking of a turf, newest first.
    Restricted to the turf owner and administrators.
    """
    turf = get_turf_or_404(db, turf_id)
    if not current_user.is_admin and turf.owner_id != current_user.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized to view bookings for this turf")
    return (
        db.query(Booking)
        .filter(Booking.turf_id == turf_id)
        .order_by(Booking.booking_date.desc(), Booking.start_time.desc())
        .all()
    )
