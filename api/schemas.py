from pydantic import BaseModel, Field


class ExtractRequest(BaseModel):
    report_text: str = ""
    fields: list[str] | None = None


class ExtractResponse(BaseModel):
    fields: dict[str, str]
    empty_fields: list[str] = Field(default_factory=list)


class RecordPreviewRequest(BaseModel):
    patient_id: int | str | None = None
    image_url: str | None = None
    report_text: str = ""


class RecordPreviewResponse(BaseModel):
    record: dict
    empty_fields: list[str] = Field(default_factory=list)
