import os

from celery import Celery
from celery.schedules import crontab  # type: ignore

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings.dev")

app = Celery("shortlet")

app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()


# ============================================================================
# CELERY BEAT SCHEDULE (Periodic Tasks)
# ============================================================================

app.conf.beat_schedule = {
    # Fail bookings left unpaid - every 5 minutes
    "expire-stale-pending-bookings": {
        "task": "bookings.expire_stale_pending_bookings",
        "schedule": 300.0,
        "options": {"expires": 280},
    },
    # Write missing calendar days for paid bookings - every 10 minutes
    "reconcile-booking-overrides": {
        "task": "bookings.reconcile_booking_overrides",
        "schedule": crontab(minute="*/10"),
    },
}
