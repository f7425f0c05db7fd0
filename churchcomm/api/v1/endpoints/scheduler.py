"""
Scheduler Endpoint
HTTP trigger for one outreach tick (cron or manual invocation)
"""
import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from churchcomm.api.v1.dependencies import get_outreach_scheduler, verify_scheduler_secret
from churchcomm.domain.services.outreach_scheduler import OutreachScheduler

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/scheduler", tags=["scheduler"])


@router.post("/run", dependencies=[Depends(verify_scheduler_secret)])
async def run_scheduler(scheduler: OutreachScheduler = Depends(get_outreach_scheduler)):
    """
    Evaluate every organization's triggers, requeue retries and dispatch
    scheduled calls.

    Returns:
        Tick summary with per-organization results
    """
    try:
        summary = await scheduler.run_tick()
    except Exception as e:
        logger.error(f"Auto call trigger error: {e}", exc_info=True)
        return JSONResponse(status_code=500, content={"error": str(e)})

    return summary.model_dump()
