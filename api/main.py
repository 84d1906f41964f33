import time

from dotenv import load_dotenv

load_dotenv()

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from api.schemas import ExtractRequest, ExtractResponse, RecordPreviewRequest, RecordPreviewResponse
from skinreport.config.logger import configure_logging, get_logger, log_stage
from skinreport.extraction import get_extractor
from skinreport.records import build_analysis_record

app = FastAPI(title="Skin Report Field Extractor")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

configure_logging()
logger = get_logger("api")


@app.middleware("http")
async def log_requests(request, call_next):
    start = time.perf_counter()
    logger.info("[request.start] %s %s", request.method, request.url.path)
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - start) * 1000
    logger.info(
        "[request.end] %s %s status=%s elapsed=%.1fms",
        request.method,
        request.url.path,
        response.status_code,
        elapsed_ms,
    )
    return response


@app.get("/api/health")
async def health():
    return {"ok": True}


@app.post("/api/extract", response_model=ExtractResponse)
async def extract_report_fields(payload: ExtractRequest):
    extractor = get_extractor()
    fields = extractor.extract_fields(payload.report_text, payload.fields)
    empty = [key for key, value in fields.items() if not value]
    logger.info("[extract] text_len=%s fields=%s empty=%s", len(payload.report_text), len(fields), empty)
    log_stage(logger, "extract", fields)
    return ExtractResponse(fields=fields, empty_fields=empty)


@app.post("/api/analysis-records/preview", response_model=RecordPreviewResponse)
async def preview_analysis_record(payload: RecordPreviewRequest):
    try:
        record = build_analysis_record(
            payload.patient_id,
            payload.image_url,
            payload.report_text,
            extractor=get_extractor(),
        )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return RecordPreviewResponse(record=record.to_row(), empty_fields=record.empty_fields())
