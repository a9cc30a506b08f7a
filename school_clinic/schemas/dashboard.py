"""Pydantic schemas for dashboard statistics."""

from pydantic import BaseModel


class WeeklyStat(BaseModel):
    date: str  # YYYY-MM-DD
    count: int


class DashboardResponse(BaseModel):
    school_name: str
    visits_today: int
    special_cases_today: int
    referrals_today: int
    weekly_stats: list[WeeklyStat]
