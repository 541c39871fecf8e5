import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from starlette.concurrency import run_in_threadpool

from pyquer.api.deps import (
    get_current_user_id,
    get_history,
    get_optional_user_id,
    get_pipeline,
    get_storage,
    to_http_exception,
)
from pyquer.document.text_extractor import needs_ocr
from pyquer.document.validator import is_pdf
from pyquer.errors import PyquerError
from pyquer.models.analysis import AnalysisHistoryRecord, AnalysisRequest, AnalysisResult, Provider, ProviderAnalysisRequest
from pyquer.models.paper import UploadedPaper, normalize_year

logger = logging.getLogger(__name__)

router = APIRouter()


class UploadResponse(BaseModel):
    files: List[UploadedPaper]


class HistoryResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    history: List[AnalysisHistoryRecord] = Field(default_factory=list)


def _form_value(values: Optional[List[str]], index: int) -> Optional[str]:
    if not values or index >= len(values):
        return None
    return values[index] or None


@router.post("/upload", response_model=UploadResponse)
async def upload_papers(
    files: Optional[List[UploadFile]] = File(None),
    subjects: Optional[List[str]] = Form(None),
    years: Optional[List[str]] = Form(None),
    storage=Depends(get_storage),
):
    """Store uploaded PDFs and report whether each needs OCR"""
    if not files:
        raise HTTPException(status_code=400, detail={"error": "No file uploaded"})

    contents = []
    for upload in files:
        data = await upload.read()
        if not is_pdf(data):
            raise HTTPException(status_code=400, detail={"error": f"Only PDF files are allowed: {upload.filename}"})
        contents.append((upload.filename or "upload.pdf", data))

    stored = []
    for index, (filename, data) in enumerate(contents):
        file_id = await run_in_threadpool(storage.save, data, filename)
        flagged = await run_in_threadpool(needs_ocr, data, filename)
        stored.append(UploadedPaper(
            file_id=file_id,
            original_name=filename,
            subject=_form_value(subjects, index) or "Unknown Subject",
            year=normalize_year(_form_value(years, index)),
            needs_ocr=flagged,
        ))
        logger.info("Uploaded %s as %s (needsOCR=%s)", filename, file_id, flagged)

    return UploadResponse(files=stored)


def _run_analysis(pipeline, papers, provider, user_id) -> AnalysisResult:
    try:
        return pipeline.analyze(papers, provider, user_id=user_id)
    except PyquerError as e:
        logger.error("Analysis failed: %s", e)
        raise to_http_exception(e)


@router.post("/analyze", response_model=AnalysisResult)
def analyze_papers(
    request: AnalysisRequest,
    pipeline=Depends(get_pipeline),
    user_id: Optional[int] = Depends(get_optional_user_id),
):
    """Analyze uploaded papers with the selected provider"""
    return _run_analysis(pipeline, request.papers, request.provider, user_id)


def _provider_endpoint(provider: Provider):
    def endpoint(
        request: ProviderAnalysisRequest,
        pipeline=Depends(get_pipeline),
        user_id: Optional[int] = Depends(get_optional_user_id),
    ):
        return _run_analysis(pipeline, request.papers, provider, user_id)

    endpoint.__name__ = f"analyze_with_{provider.value}"
    endpoint.__doc__ = f"Analyze uploaded papers with {provider.value}"
    return endpoint


for _provider in Provider:
    router.add_api_route(
        f"/ai/{_provider.value}",
        _provider_endpoint(_provider),
        methods=["POST"],
        response_model=AnalysisResult,
    )


@router.get("/ai/history", response_model=HistoryResponse)
def analysis_history(
    user_id: int = Depends(get_current_user_id),
    history=Depends(get_history),
):
    """Analysis history for the logged-in user, newest first"""
    try:
        return HistoryResponse(history=history.get_user_history(user_id))
    except Exception as e:
        logger.error("Error fetching analysis history: %s", e)
        raise HTTPException(status_code=500, detail={"error": "Failed to fetch analysis history"})
