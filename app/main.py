import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from app.config import LOG_LEVEL
from app.routers import bookings, notifications, points, profiles, reviews, testimonials, turfs
from app.db import SessionLocal, init_database
from app.seed import seed_achievements

logging.basicConfig(level=LOG_LEVEL)


@asynccontextmanager
async def lifespan(_: FastAPI):
    "lifespan for initing database"
    init_database()
    db = SessionLocal()
    try:
        seed_achievements(db)
    finally:
        db.close()
    yield


app = FastAPI(
    lifespan=lifespan,
    title="Turf booker",
    description="Turf listings, slot bookings, reviews and loyalty points based on FastAPI.",
    version="0.1.0",
    license_info={
        "name": "MIT",
        "url": "https://opensource.org/licenses/MIT",
    },
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


app.include_router(turfs.router)
app.include_router(bookings.router)
app.include_router(reviews.router)
app.include_router(testimonials.router)
app.include_router(points.router)
app.include_router(profiles.router)
app.include_router(notifications.router)
