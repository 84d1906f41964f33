"""Analysis record assembly.

The record shape mirrors the ``skin_analyses`` storage row. Persistence itself
belongs to the storage service; this module only fills the row from a report.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field

from skinreport.config.logger import get_logger
from skinreport.extraction import FieldExtractor, FieldName, get_extractor

logger = get_logger(__name__)

# Field key -> storage column.
RECORD_COLUMNS: dict[str, str] = {
    FieldName.CONDITION.value: "skin_condition",
    FieldName.SEVERITY.value: "severity",
    FieldName.TREATMENTS.value: "ayurvedic_treatments",
    FieldName.RECOMMENDED_FOODS.value: "recommended_foods",
    FieldName.FOODS_TO_AVOID.value: "foods_to_avoid",
    FieldName.LIFESTYLE_RECOMMENDATIONS.value: "lifestyle_recommendations",
}


class AnalysisRecord(BaseModel):
    patient_id: int | str = Field(description="Identifier of the patient the image belongs to.")
    image_url: str = Field(description="Reference to the uploaded skin image.")
    analysis_result: str = Field(default="", description="Full report text as returned by the vision model.")
    skin_condition: str = Field(default="", description="Observed condition section.")
    severity: str = Field(default="", description="Severity assessment section.")
    ayurvedic_treatments: str = Field(default="", description="Treatment section.")
    recommended_foods: str = Field(default="", description="Dietary recommendations section.")
    foods_to_avoid: str = Field(default="", description="Foods to avoid section.")
    lifestyle_recommendations: str = Field(default="", description="Lifestyle section.")
    extra_fields: dict[str, str] = Field(
        default_factory=dict,
        description="Sections from deployment-specific rule table entries with no dedicated column.",
    )
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def field_values(self) -> dict[str, str]:
        values = {key: getattr(self, column) for key, column in RECORD_COLUMNS.items()}
        values.update(self.extra_fields)
        return values

    def empty_fields(self) -> list[str]:
        return [key for key, value in self.field_values().items() if not value]

    def to_row(self) -> dict[str, Any]:
        """Storage row; empty sections are stored as NULL."""
        row: dict[str, Any] = {
            "patient_id": self.patient_id,
            "image_url": self.image_url,
            "analysis_result": self.analysis_result or None,
            "created_at": self.created_at.isoformat(),
        }
        for column in RECORD_COLUMNS.values():
            row[column] = getattr(self, column) or None
        if self.extra_fields:
            row["extra_fields"] = dict(self.extra_fields)
        return row


def build_analysis_record(
    patient_id: int | str | None,
    image_url: str | None,
    report_text: str,
    extractor: FieldExtractor | None = None,
) -> AnalysisRecord:
    if patient_id in (None, "") or not image_url:
        raise ValueError("Patient ID and image URL are required")

    extractor = extractor if extractor is not None else get_extractor()
    extracted = extractor.extract_fields(report_text)

    columns: dict[str, str] = {}
    extra: dict[str, str] = {}
    for key, value in extracted.items():
        column = RECORD_COLUMNS.get(key)
        if column is None:
            extra[key] = value
        else:
            columns[column] = value

    record = AnalysisRecord(
        patient_id=patient_id,
        image_url=image_url,
        analysis_result=report_text if isinstance(report_text, str) else "",
        extra_fields=extra,
        **columns,
    )
    logger.info(
        "[record] patient_id=%s filled=%s empty=%s",
        patient_id,
        sum(1 for value in extracted.values() if value),
        [key for key, value in extracted.items() if not value],
    )
    return record
