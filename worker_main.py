# worker_main.py
"""
Worker helper that:
 - lazily creates engine/session
 - imports model modules under the package 'api' (avoids duplicate imports)
 - runs the stats reconciliation pass once or on an interval
"""

import sys
import logging
import argparse
from pathlib import Path

logger = logging.getLogger("worker")
logger.setLevel(logging.INFO)
handler = logging.StreamHandler(sys.stdout)
handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(message)s"))
logger.handlers.clear()
logger.addHandler(handler)

_SessionLocal = None


def get_sessionmaker():
    global _SessionLocal
    if _SessionLocal is None:
        from config.database import SessionLocal
        _SessionLocal = SessionLocal
    return _SessionLocal


def _ensure_models_registered():
    """
    Import model files under api/ using package imports and then call configure_mappers().
    """
    project_root = Path(__file__).parent.resolve()
    if str(project_root) not in sys.path:
        sys.path.insert(0, str(project_root))

    from models.index import scan_models
    from sqlalchemy.orm import configure_mappers

    loaded = scan_models(project_root / "api")
    configure_mappers()
    logger.debug("Registered %d model(s): %s", len(loaded), ", ".join(sorted(loaded)))


def reconcile_stats_job(user_id=None):
    """Recompute every profile's counters from its records and repair drift."""
    _ensure_models_registered()
    from api.user.user_service import reconcile_user_stats

    SessionLocal = get_sessionmaker()
    db = SessionLocal()
    try:
        corrections = reconcile_user_stats(db, user_id=user_id)
        if corrections:
            logger.info("Reconciled %d profile(s)", len(corrections))
        else:
            logger.info("No stats drift found")
        return corrections
    except Exception:
        db.rollback()
        logger.exception("Stats reconciliation failed")
        raise
    finally:
        db.close()


def _run_scheduled(interval: int):
    from apscheduler.schedulers.blocking import BlockingScheduler

    scheduler = BlockingScheduler()
    scheduler.add_job(
        reconcile_stats_job,
        "interval",
        seconds=interval,
        id="reconcile_stats",
        max_instances=1,
        coalesce=True,
    )
    logger.info("Worker started in loop mode (interval=%ss)", interval)
    try:
        scheduler.start()
    except (KeyboardInterrupt, SystemExit):
        logger.info("Worker stopped")


def main(argv=None):
    from config.settings import settings

    parser = argparse.ArgumentParser(description="EcoCycle worker (stats reconciliation)")
    parser.add_argument(
        "--interval",
        type=int,
        nargs="?",
        const=settings.RECONCILE_INTERVAL_SECONDS,
        help="Interval in seconds between runs (loop mode)",
    )
    parser.add_argument("--run-reconcile", action="store_true", help="Run reconcile_stats_job() once")
    parser.add_argument("--user", help="Limit a one-shot reconciliation to a single user id")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    args = parser.parse_args(argv)

    if args.debug:
        logger.setLevel(logging.DEBUG)
        logger.debug("Debug logging enabled")

    if args.interval:
        _run_scheduled(args.interval)
        return

    if not args.run_reconcile:
        logger.info("worker_main executed (no jobs run). Use --run-reconcile or --interval.")
        return

    logger.info("Running reconcile_stats_job()")
    reconcile_stats_job(user_id=args.user)


if __name__ == "__main__":
    main()
