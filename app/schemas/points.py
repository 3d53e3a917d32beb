from pydantic import BaseModel, ConfigDict
from datetime import datetime
from typing import Optional


class PointsResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: str
    points: int


class AchievementResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: str
    icon_url: Optional[str] = None
    points_required: int


class UserAchievementResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    earned_at: Optional[datetime] = None
    achievement: AchievementResponse


class LeaderboardEntry(BaseModel):
    rank: int
    user_id: str
    username: Optional[str] = None
    points: int


class ReferralCreate(BaseModel):
    referred_id: str


class ReferralResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    referrer_id: str
    referred_id: str
    status: str
    points_awarded: int
