"""
Analyze API router for earnings screenshots.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile
from fastapi.concurrency import run_in_threadpool

from riderscan.config import settings
from riderscan.models.earnings import AnalysisOutcome, Platform, TextAnalysisRequest
from riderscan.services.ocr import OCRService
from riderscan.services.parser import EarningsParser
from riderscan.services.storage import RecordStore, StorageError
from riderscan.utils.money import format_won

router = APIRouter(prefix="/analyze", tags=["analyze"])
logger = logging.getLogger(__name__)

ALLOWED_TYPES = ["image/jpeg", "image/jpg", "image/png", "image/webp"]


def get_ocr_service(request: Request) -> OCRService:
    """OCR service built once at startup."""
    return request.app.state.ocr


def get_parser() -> EarningsParser:
    return EarningsParser()


def get_record_store() -> RecordStore:
    return RecordStore()


def _persist(
    outcome: AnalysisOutcome,
    user_id: Optional[str],
    store: RecordStore,
) -> AnalysisOutcome:
    """Save valid outcomes for identified riders."""
    if not user_id or not outcome.validation.is_valid:
        return outcome

    try:
        store.save_record(user_id, outcome)
    except StorageError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return outcome


@router.post("", response_model=AnalysisOutcome)
async def analyze_screenshot(
    file: UploadFile = File(...),
    platform: Platform = Form(Platform.OTHER),
    user_id: Optional[str] = Form(None),
    ocr: OCRService = Depends(get_ocr_service),
    parser: EarningsParser = Depends(get_parser),
    store: RecordStore = Depends(get_record_store),
):
    """
    Analyze an earnings screenshot.

    This endpoint:
    1. Accepts an image upload (JPG, PNG, WEBP)
    2. Runs OCR in the thread pool
    3. Extracts and validates the earnings
    4. Saves the record when a user_id is given and the result is valid

    Args:
        file: Uploaded screenshot
        platform: Platform selected by the rider
        user_id: Optional user ID for persistence

    Returns:
        AnalysisOutcome with result, validation and points eligibility
    """
    if file.content_type not in ALLOWED_TYPES:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid file type: {file.content_type}. Allowed: JPG, PNG, WEBP"
        )

    file_data = await file.read()
    file_size_mb = len(file_data) / (1024 * 1024)

    if file_size_mb > settings.MAX_UPLOAD_MB:
        raise HTTPException(
            status_code=400,
            detail=f"File too large: {file_size_mb:.2f}MB. Maximum: {settings.MAX_UPLOAD_MB:g}MB"
        )

    logger.debug("Running OCR on uploaded screenshot", extra={"upload_name": file.filename})
    text = await run_in_threadpool(ocr.extract_text_from_image, file_data)

    outcome = await run_in_threadpool(parser.analyze, text, platform)
    logger.info("Screenshot analyzed", extra={
        "platform": platform.value,
        "is_valid": outcome.validation.is_valid,
        "amount": format_won(outcome.result.amount),
        "delivery_count": outcome.result.delivery_count,
    })
    return _persist(outcome, user_id, store)


@router.post("/text", response_model=AnalysisOutcome)
async def analyze_text(
    request: TextAnalysisRequest,
    parser: EarningsParser = Depends(get_parser),
    store: RecordStore = Depends(get_record_store),
):
    """Analyze text that was already recognized on the device."""
    outcome = await run_in_threadpool(parser.analyze, request.text, request.platform)
    logger.info("Text analyzed", extra={
        "platform": request.platform.value,
        "is_valid": outcome.validation.is_valid,
        "amount": format_won(outcome.result.amount),
    })
    return _persist(outcome, request.user_id, store)
