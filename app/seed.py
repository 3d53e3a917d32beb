"""Seed the achievement catalogue and sample turf listings.

Run ``python -m app.seed`` to load the sample turfs into an empty database.
"""
import logging
from sqlalchemy.orm import Session
from app.db import SessionLocal, init_database
from app.models.points import Achievement
from app.models.turf import Turf

logger = logging.getLogger(__name__)

DEFAULT_ACHIEVEMENTS = [
    {"name": "Rookie", "description": "Reach 100 points", "points_required": 100},
    {"name": "Regular", "description": "Reach 500 points", "points_required": 500},
    {"name": "Champion", "description": "Reach 1000 points", "points_required": 1000},
]

SAMPLE_TURFS = [
    {
        "name": "Football Paradise",
        "description": "Professional football turf with FIFA-approved artificial grass. Perfect for 11-a-side matches.",
        "location": "Gachibowli, Hyderabad",
        "price": 1500,
        "capacity": 22,
        "features": ["FIFA-approved turf", "Floodlights", "Changing rooms", "Parking"],
    },
    {
        "name": "Cricket Hub",
        "description": "Premium cricket facility with both synthetic and natural pitches.",
        "location": "Madhapur, Hyderabad",
        "price": 1800,
        "capacity": 30,
        "features": ["Natural grass", "Practice nets", "Bowling machine", "Equipment rental"],
    },
    {
        "name": "Futsal Zone",
        "description": "Indoor futsal facility with professional flooring and high-intensity lighting.",
        "location": "Banjara Hills, Hyderabad",
        "price": 1300,
        "capacity": 12,
        "features": ["Professional futsal court", "Air conditioning", "Score display"],
    },
    {
        "name": "Badminton Elite",
        "description": "Premium badminton facility with international standard courts.",
        "location": "HITEC City, Hyderabad",
        "price": 1000,
        "capacity": 8,
        "features": ["BWF standard courts", "Pro shop", "Coaching"],
    },
]


def seed_achievements(db: Session) -> int:
    existing = {name for (name,) in db.query(Achievement.name).all()}
    added = 0
    for data in DEFAULT_ACHIEVEMENTS:
        if data["name"] not in existing:
            db.add(Achievement(**data))
            added += 1
    if added:
        db.commit()
        logger.info(f"Seeded {added} achievements")
    return added


def seed_turfs(db: Session) -> int:
    if db.query(Turf).count():
        logger.info("Turfs already present, skipping seed")
        return 0
    for data in SAMPLE_TURFS:
        db.add(Turf(**data))
    db.commit()
    logger.info(f"Seeded {len(SAMPLE_TURFS)} turfs")
    return len(SAMPLE_TURFS)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    init_database()
    db = SessionLocal()
    try:
        seed_achievements(db)
        seed_turfs(db)
    finally:
        db.close()
