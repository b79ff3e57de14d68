"""
Persistence of accepted earnings records in Supabase.
"""

import logging
from typing import Any, Dict, Optional

from riderscan.config import settings
from riderscan.models.earnings import AnalysisOutcome, WeeklyRange
from riderscan.utils.supabase import get_supabase_client

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Raised when a record cannot be written."""


class RecordStore:
    """Writes one row per accepted screenshot to the records table."""

    def __init__(self, client=None, table: Optional[str] = None):
        self._client = client
        self.table = table or settings.RECORDS_TABLE

    @property
    def supabase(self):
        # Connect on first write; most analyses are never persisted
        if self._client is None:
            self._client = get_supabase_client()
        return self._client

    def build_row(self, user_id: str, outcome: AnalysisOutcome) -> Dict[str, Any]:
        """
        Build the database row for an outcome.

        Weekly records store both range ends; single-day records store the
        same date twice so range queries work for both.
        """
        result = outcome.result
        period = result.period
        if isinstance(period, WeeklyRange):
            start, end = period.start, period.end
        else:
            start = end = period.date

        return {
            "user_id": user_id,
            "platform": result.platform.value,
            "detected_platform": result.detected_platform.value,
            "period_kind": period.kind,
            "period_start": start.isoformat(),
            "period_end": end.isoformat(),
            "amount": result.amount,
            "delivery_count": result.delivery_count,
            "confidence": result.confidence,
            "breakdown": (
                [entry.model_dump(mode="json") for entry in result.breakdown]
                if result.breakdown is not None else None
            ),
            "warnings": outcome.validation.warnings,
            "points_eligible": outcome.points_eligible,
            "raw_text": result.raw_text,
        }

    def save_record(self, user_id: str, outcome: AnalysisOutcome) -> Dict[str, Any]:
        """
        Insert a record and return the stored row.

        Raises:
            StorageError: If Supabase rejects the insert or returns nothing
        """
        row = self.build_row(user_id, outcome)
        try:
            response = self.supabase.table(self.table).insert(row).execute()
        except Exception as e:
            logger.error("Failed to insert record", exc_info=True, extra={
                "user_id": user_id,
                "table": self.table,
            })
            raise StorageError(f"Failed to save record: {e}") from e

        if not response.data:
            logger.error("Insert returned no data", extra={"user_id": user_id, "table": self.table})
            raise StorageError("Failed to save record: no data returned")

        record = response.data[0]
        logger.info("Record saved", extra={
            "user_id": user_id,
            "record_id": record.get("id"),
            "amount": outcome.result.amount,
        })
        return record
