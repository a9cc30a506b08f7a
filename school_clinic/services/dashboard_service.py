"""Dashboard service - counts and the weekly visit series."""

from datetime import date, timedelta

from sqlalchemy import func
from sqlalchemy.orm import Session

from school_clinic.core.config import settings
from school_clinic.db.models import SETTINGS_ROW_ID, ClinicSettings, DailyVisit, Referral, SpecialFollowUp
from school_clinic.schemas.dashboard import DashboardResponse, WeeklyStat
from school_clinic.utils.datetime_parsing import clinic_today, day_bounds

WEEKLY_WINDOW_DAYS = 7


def _count_on_day(db: Session, column, day: date) -> int:
    lower, upper = day_bounds(day, day)
    return (
        db.query(func.count())
        .select_from(column.class_)
        .filter(column >= lower, column < upper)
        .scalar()
        or 0
    )


def get_weekly_stats(db: Session, today: date) -> list[WeeklyStat]:
    """
    Visit counts per day for today and the six days before it.

    Ascending by date. Days without visits are omitted.
    """
    lower, upper = day_bounds(today - timedelta(days=WEEKLY_WINDOW_DAYS - 1), today)
    visit_day = func.date(DailyVisit.occurred_at)
    rows = (
        db.query(visit_day, func.count(DailyVisit.id))
        .filter(DailyVisit.occurred_at >= lower, DailyVisit.occurred_at < upper)
        .group_by(visit_day)
        .order_by(visit_day)
        .all()
    )
    return [WeeklyStat(date=str(day), count=count) for day, count in rows]


def get_dashboard(db: Session, today: date | None = None) -> DashboardResponse:
    """Today's counts in the clinic-local calendar plus the school name."""
    today = today or clinic_today()

    special_cases_today = (
        db.query(func.count(SpecialFollowUp.id))
        .filter(SpecialFollowUp.follow_up_date == today)
        .scalar()
        or 0
    )
    row = db.get(ClinicSettings, SETTINGS_ROW_ID)
    school_name = (row.school_name if row else None) or settings.DEFAULT_SCHOOL_NAME

    return DashboardResponse(
        school_name=school_name,
        visits_today=_count_on_day(db, DailyVisit.occurred_at, today),
        special_cases_today=special_cases_today,
        referrals_today=_count_on_day(db, Referral.occurred_at, today),
        weekly_stats=get_weekly_stats(db, today),
    )
