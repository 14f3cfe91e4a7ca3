"""Tests du job de désactivation des coupons expirés."""

from datetime import datetime, timedelta, timezone

from apscheduler.schedulers.background import BackgroundScheduler

from app.core import scheduler as scheduler_module
from app.core.config import settings
from tests.conftest import TestingSessionLocal


def test_job_deactivates_expired_coupons(db_session, coupon_factory):
    now = datetime.now(timezone.utc)
    expired = coupon_factory(code="GONE10", end_date=now - timedelta(minutes=5))
    running = coupon_factory(code="LIVE10")

    count = scheduler_module.deactivate_expired_coupons_job(session_factory=TestingSessionLocal)

    assert count == 1
    db_session.expire_all()
    assert expired.is_active is False
    assert running.is_active is True


def test_job_is_idempotent(db_session, coupon_factory):
    coupon_factory(code="GONE20", end_date=datetime.now(timezone.utc) - timedelta(days=1))

    assert scheduler_module.deactivate_expired_coupons_job(session_factory=TestingSessionLocal) == 1
    assert scheduler_module.deactivate_expired_coupons_job(session_factory=TestingSessionLocal) == 0


def test_job_logs_and_swallows_errors(caplog):
    def broken_factory():
        raise RuntimeError("database unavailable")

    assert scheduler_module.deactivate_expired_coupons_job(session_factory=broken_factory) == 0
    assert "database unavailable" in caplog.text


def test_periodic_job_is_registered(monkeypatch):
    background = BackgroundScheduler(timezone="UTC")
    monkeypatch.setattr(scheduler_module, "scheduler", background)

    scheduler_module.add_periodic_jobs()

    job = background.get_job("deactivate_expired_coupons")
    assert job is not None
    assert str(job.trigger.fields[5]) == str(settings.coupon_expiry_hour)


def test_scheduler_disabled_by_default():
    scheduler_module.init_scheduler()
    assert scheduler_module.scheduler is None
    scheduler_module.shutdown_scheduler()
