"""Request assembler: builds the outbound advice request.

Pure transform, no I/O. The current time is treated as already localized;
time zone conversion is the caller's job.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any

from tempo.core.errors import PreconditionError, ValidationError
from tempo.domains.advice.domain_logic.health_models import HealthSnapshot
from tempo.domains.advice.domain_logic.profile_models import Domain, UserProfile
from tempo.domains.advice.domain_logic.profile_validator import validate_profile
from tempo.domains.advice.domain_logic.try_history import RecentTryHistory


class DayOfWeek(str, Enum):
    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"


class TimeSlot(str, Enum):
    MORNING = "morning"
    MIDDAY = "midday"
    EVENING = "evening"


MORNING_START_HOUR = 5
MIDDAY_START_HOUR = 12
EVENING_START_HOUR = 18


def time_slot_for(moment: datetime) -> TimeSlot:
    """Greeting slot: 05:00-11:59 morning, 12:00-17:59 midday, otherwise evening."""
    if moment.hour < MORNING_START_HOUR:
        return TimeSlot.EVENING
    if moment.hour < MIDDAY_START_HOUR:
        return TimeSlot.MORNING
    if moment.hour < EVENING_START_HOUR:
        return TimeSlot.MIDDAY
    return TimeSlot.EVENING


def day_of_week_for(moment: datetime) -> DayOfWeek:
    return list(DayOfWeek)[moment.weekday()]


@dataclass(frozen=True)
class Location:
    latitude: float
    longitude: float
    city: str | None = None

    def __post_init__(self) -> None:
        if not -90.0 <= self.latitude <= 90.0:
            raise ValueError(f"latitude out of range [-90, 90]: {self.latitude}")
        if not -180.0 <= self.longitude <= 180.0:
            raise ValueError(f"longitude out of range [-180, 180]: {self.longitude}")

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"latitude": self.latitude, "longitude": self.longitude}
        if self.city:
            payload["city"] = self.city
        return payload


@dataclass(frozen=True)
class RequestContextInput:
    """Caller-supplied context for one advice request."""

    current_time: datetime
    history: RecentTryHistory
    last_weekly_try: str | None = None


@dataclass(frozen=True)
class RequestContext:
    current_time: datetime
    day_of_week: DayOfWeek
    is_monday: bool
    time_slot: TimeSlot
    recent_daily_tries: tuple[str, ...]
    daily_try_domain: Domain
    last_weekly_try: str | None = None

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "currentTime": self.current_time.isoformat(),
            "dayOfWeek": self.day_of_week.value,
            "isMonday": self.is_monday,
            "timeSlot": self.time_slot.value,
            "recentDailyTries": list(self.recent_daily_tries),
            "dailyTryDomain": self.daily_try_domain.value,
        }
        if self.last_weekly_try:
            payload["lastWeeklyTry"] = self.last_weekly_try
        return payload


@dataclass(frozen=True)
class AdviceRequest:
    """Ephemeral per-invocation request; never persisted."""

    user_profile: UserProfile
    health_data: HealthSnapshot
    location: Location
    context: RequestContext

    @property
    def domain(self) -> Domain:
        return self.context.daily_try_domain

    def to_payload(self) -> dict[str, Any]:
        return {
            "userProfile": self.user_profile.to_payload(),
            "healthData": self.health_data.to_payload(),
            "location": self.location.to_payload(),
            "context": self.context.to_payload(),
        }


def assemble_request(
    profile: UserProfile,
    snapshot: HealthSnapshot,
    location: Location,
    context: RequestContextInput,
    domain: Domain,
) -> AdviceRequest:
    """Build the AdviceRequest for today's selected domain.

    Raises:
        PreconditionError: if the profile does not pass validation or the
            snapshot carries no domain scores.
    """
    try:
        validate_profile(profile)
    except ValidationError as exc:
        raise PreconditionError(
            "profile_not_validated", field=exc.field, code=exc.code
        ) from exc

    if snapshot.scores is None:
        raise PreconditionError(
            "missing_domain_scores", date=snapshot.date.isoformat()
        )

    now = context.current_time
    day_of_week = day_of_week_for(now)
    request_context = RequestContext(
        current_time=now,
        day_of_week=day_of_week,
        is_monday=day_of_week is DayOfWeek.MONDAY,
        time_slot=time_slot_for(now),
        recent_daily_tries=tuple(context.history.topics(as_of=now.date())),
        daily_try_domain=domain,
        last_weekly_try=context.last_weekly_try,
    )
    return AdviceRequest(
        user_profile=profile,
        health_data=snapshot,
        location=location,
        context=request_context,
    )
