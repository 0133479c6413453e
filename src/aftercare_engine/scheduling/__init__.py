from aftercare_engine.scheduling.age import AgeBreakdown, age_category, categorize_by_age
from aftercare_engine.scheduling.disposition import apply_disposition, classify
from aftercare_engine.scheduling.engine import BatchActivationEngine, dedup_key
from aftercare_engine.scheduling.evergreen import generate_evergreen_tasks
from aftercare_engine.scheduling.refresh import RefreshPlan, plan_refresh
from aftercare_engine.scheduling.reminders import due_reminders, year_label
from aftercare_engine.scheduling.timing import ResolvedTiming, resolve_due_date, years_between

__all__ = [
    "AgeBreakdown",
    "BatchActivationEngine",
    "RefreshPlan",
    "ResolvedTiming",
    "age_category",
    "apply_disposition",
    "categorize_by_age",
    "classify",
    "dedup_key",
    "due_reminders",
    "generate_evergreen_tasks",
    "plan_refresh",
    "resolve_due_date",
    "year_label",
    "years_between",
]
