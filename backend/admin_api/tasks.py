import logging

from sqlalchemy.exc import SQLAlchemyError

from .celery_app import celery_app
from .config import BATCH_GROUP_SIZE, BATCH_PAUSE_SECONDS, DEFAULT_THEME
from .database import SessionLocal
from .resolution.generation import BatchJob, GenerationClient, record_generated_asset, run_batch
from .resolution.slots import RequestContext

logger = logging.getLogger(__name__)


@celery_app.task(bind=True, name="admin_api.tasks.generate_letter_assets_batch")
def generate_letter_assets_batch(self, letters, slot_keys, child_name="", theme=DEFAULT_THEME):
    """
    Background task generating Letter Hunt assets for several letters.

    Jobs run sequentially with a pause between groups; each generated file
    is recorded as a pending asset for review.
    """
    jobs = [
        BatchJob(slot_key=slot_key, context=RequestContext(child_name, letter, theme))
        for letter in letters
        for slot_key in slot_keys
    ]
    logger.info(f"Starting batch generation: {len(jobs)} jobs for letters {letters}")

    db = SessionLocal()
    try:
        def record(result, data):
            try:
                record_generated_asset(db, result.job.slot_key, result.job.context, data)
            except SQLAlchemyError:
                db.rollback()
                raise

        results = run_batch(
            GenerationClient(),
            jobs,
            group_size=BATCH_GROUP_SIZE,
            pause_seconds=BATCH_PAUSE_SECONDS,
            on_result=record,
        )
    finally:
        db.close()

    failed = [
        {"slot": r.job.slot_key, "letter": r.job.context.target_letter, "url": r.url, "error": r.error}
        for r in results if not r.ok
    ]
    logger.info(f"Batch generation finished: {len(results) - len(failed)} generated, {len(failed)} failed")
    return {
        "generated": len(results) - len(failed),
        "failed": failed,
    }
