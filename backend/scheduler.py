import os

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from tasks.eod_tasks import run_eod_tasks
from utils.clock import APP_TIMEZONE

scheduler = BackgroundScheduler()

# Every day at 11:00 PM bakery time
scheduler.add_job(
    run_eod_tasks,
    CronTrigger(hour=int(os.getenv("EOD_HOUR", "23")), minute=0, timezone=APP_TIMEZONE),
    id='eod_tasks_job',
)
