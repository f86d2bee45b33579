# peoplefinder/services/profiles_report_service.py
"""
Profiles Percentage Report - share of profiles with a photo and with
additional information, for the dashboard feed
"""

from dataclasses import dataclass
from typing import Any, Dict, List

from flask import current_app
from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError

from peoplefinder.completion.errors import StorageError
from peoplefinder.completion.query_builder import build_presence_counts_query
from peoplefinder.services.completion_service import CompletionService


@dataclass
class ReportField:
    """Column definition published with the report"""

    id: str
    name: str
    kind: str  # "number" or "percentage"


class ProfilesPercentageReport:
    """Total profiles and the fraction with a photo or additional information"""

    PHOTO_FIELD = "profile_photo"
    ADDITIONAL_INFO_FIELDS = ("description", "current_project")

    def __init__(self, service: CompletionService):
        self.service = service

    def fields(self) -> List[ReportField]:
        return [
            ReportField(id="total", name="Total", kind="number"),
            ReportField(id="with_photos", name="With Photos", kind="percentage"),
            ReportField(id="with_additional_info", name="With Additional Info", kind="percentage"),
        ]

    def _presences(self) -> Dict[str, Any]:
        registry = self.service.policy.registry
        photo = registry.resolve_presence_expression(registry.get(self.PHOTO_FIELD))
        additional_info = or_(
            *(registry.resolve_presence_expression(registry.get(name)) for name in self.ADDITIONAL_INFO_FIELDS)
        )
        return {"with_photos": photo, "with_additional_info": additional_info}

    def items(self) -> List[Dict[str, Any]]:
        statement = build_presence_counts_query(self.service.policy, self._presences())
        try:
            with self.service.engine.connect() as connection:
                rows = connection.execute(statement).all()
        except SQLAlchemyError as e:
            current_app.logger.error(f"Error building profiles percentage report: {str(e)}", exc_info=True)
            raise StorageError("Failed to build profiles percentage report") from e

        if len(rows) != 1:
            raise StorageError(f"Unexpected result shape for profiles percentage report: {rows!r}")
        counts = rows[0]._mapping
        total = int(counts["total"] or 0)

        def fraction(key):
            return round(int(counts[key] or 0) / total, 2) if total > 0 else 0.0

        return [
            {
                "total": total,
                "with_photos": fraction("with_photos"),
                "with_additional_info": fraction("with_additional_info"),
            }
        ]
