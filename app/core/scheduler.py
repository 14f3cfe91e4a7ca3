# ===================================
# Fichier: app/core/scheduler.py
# ===================================
from datetime import datetime, timezone
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.executors.pool import ThreadPoolExecutor
import logging

from app.core.config import settings

logger = logging.getLogger(__name__)

scheduler = None


def init_scheduler():
    """Initialiser APScheduler"""
    global scheduler

    if not settings.scheduler_enabled:
        return

    executors = {
        'default': ThreadPoolExecutor(5),
    }

    job_defaults = {
        'coalesce': True,
        'max_instances': 1
    }

    scheduler = BackgroundScheduler(
        executors=executors,
        job_defaults=job_defaults,
        timezone='UTC'
    )

    # Ajouter les jobs périodiques
    add_periodic_jobs()

    scheduler.start()
    logger.info("✓ APScheduler démarré")


def add_periodic_jobs():
    """Ajouter les tâches périodiques"""
    # Désactivation des coupons expirés (tous les jours)
    scheduler.add_job(
        func=deactivate_expired_coupons_job,
        trigger='cron',
        hour=settings.coupon_expiry_hour,
        minute=0,
        id='deactivate_expired_coupons',
        replace_existing=True
    )


def deactivate_expired_coupons_job(session_factory=None) -> int:
    """Job de désactivation des coupons dont la date de fin est passée"""
    from app.core.database import SessionLocal
    from app.services.coupon_service import CouponService

    session_factory = session_factory or SessionLocal
    try:
        with session_factory() as db:
            count = CouponService(db).deactivate_expired(datetime.now(timezone.utc))
            logger.info(f"Coupons expirés: {count} coupon(s) désactivé(s)")
            return count
    except Exception as e:
        logger.error(f"Erreur désactivation coupons: {e}", exc_info=True)
        return 0


def shutdown_scheduler():
    """Arrêter le scheduler"""
    global scheduler
    if scheduler:
        scheduler.shutdown()
        scheduler = None
        logger.info("✓ APScheduler arrêté")
