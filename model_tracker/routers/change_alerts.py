"""Change alerts API router."""

import asyncio
import logging
from datetime import date

from fastapi import APIRouter, Depends, Query

from model_tracker.dependencies import get_change_detection_service
from model_tracker.schemas.portfolio import ChangeAlert, SendChangeAlertResponse
from model_tracker.services.change_detection_service import ChangeDetectionService
from model_tracker.services.email_service import EmailService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/change-alerts", tags=["change-alerts"])


@router.get("", response_model=ChangeAlert)
async def get_change_alert(
    target_date: date | None = Query(None, alias="date", description="Date to check (YYYY-MM-DD)"),
    service: ChangeDetectionService = Depends(get_change_detection_service),
):
    """
    Holdings changes between a date and the previous trading day.

    Query Parameters:
        - date: Date to check, today's market date by default

    Returns:
        Change alert; on weekends and holidays an empty alert explaining why
    """
    return await service.detect_changes(target_date)


@router.post("/send", response_model=SendChangeAlertResponse)
async def send_change_alert(
    target_date: date | None = Query(None, alias="date", description="Date to check (YYYY-MM-DD)"),
    service: ChangeDetectionService = Depends(get_change_detection_service),
):
    """Detect changes and email the alert when there are any."""
    alert = await service.detect_changes(target_date)
    email_sent = await asyncio.to_thread(EmailService.send_change_alert, alert)
    logger.info(f"Change alert for {alert.date}: {alert.total_changes} changes, email sent: {email_sent}")
    return SendChangeAlertResponse(email_sent=email_sent, alert=ChangeAlert.model_validate(alert))
