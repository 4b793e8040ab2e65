from datetime import datetime, timezone
from typing import Mapping, Optional

from app.config import PLANS, Plan
from app.core.errors import CapacityExceededError, ExpiredSubscriptionError, NoSubscriptionError
from app.models.school import School
from app.models.subscription import CapacityDecision

def _as_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment

def _add_years(moment: datetime, years: int) -> datetime:
    try:
        return moment.replace(year=moment.year + years)
    except ValueError:
        # 29 February in a non-leap target year
        return moment.replace(year=moment.year + years, day=28)

def resolve_plan(plan_name: Optional[str], plans: Mapping[str, Plan] = PLANS) -> Optional[Plan]:
    if not plan_name:
        return None
    return plans.get(plan_name)

def subscription_terms(plan: Plan, now: Optional[datetime] = None) -> dict:
    """Derive the stored capacity and expiry for a school signing up to ``plan``."""
    now = _as_utc(now or datetime.now(timezone.utc))
    return {
        "subscription_plan": plan.name,
        "students_allowed": plan.students_allowed,
        "subscription_expiry": _add_years(now, plan.duration_years),
    }

def check_capacity(school: School, current_count: int, requested_count: int,
                   now: Optional[datetime] = None) -> CapacityDecision:
    """
    Decide whether ``requested_count`` more students fit on the school's roster.

    Rules are evaluated in order and the first failing one wins: missing plan,
    expired subscription, then the count limit. ``current_count`` must be read
    fresh from the roster store by the caller.
    """
    if not school.subscription_plan:
        return CapacityDecision(
            admissible=False,
            reason="no subscription",
            message="No subscription plan found. Please select a plan to add students.",
        )

    now = _as_utc(now or datetime.now(timezone.utc))
    expiry = school.subscription_expiry
    if expiry is None or now > _as_utc(expiry):
        return CapacityDecision(
            admissible=False,
            reason="subscription expired",
            message="Subscription expired. Please renew your plan to add more students.",
        )

    if current_count + requested_count > school.students_allowed:
        if requested_count == 1:
            message = (f"Student limit reached for the {school.subscription_plan} plan "
                       f"(limit {school.students_allowed}, current count {current_count}).")
        else:
            message = (f"Importing {requested_count} students would exceed your "
                       f"{school.subscription_plan} plan limit of {school.students_allowed} students. "
                       f"Current count: {current_count}")
        return CapacityDecision(admissible=False, reason="limit exceeded", message=message)

    return CapacityDecision(admissible=True, reason="ok")

_ERRORS_BY_REASON = {
    "no subscription": NoSubscriptionError,
    "subscription expired": ExpiredSubscriptionError,
    "limit exceeded": CapacityExceededError,
}

def enforce_capacity(school: School, current_count: int, requested_count: int,
                     now: Optional[datetime] = None) -> CapacityDecision:
    decision = check_capacity(school, current_count, requested_count, now)
    if not decision.admissible:
        raise _ERRORS_BY_REASON[decision.reason](decision.message)
    return decision
