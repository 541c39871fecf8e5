"""
Orchestrates one analysis request:
stored file -> direct extraction -> (OCR if empty) -> classify -> prompt -> provider
"""
import logging
import os
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional, Sequence, Tuple

from pyquer.document.ocr import DEFAULT_PAGE_SIZE, debug_image_writer, ocr_pdf
from pyquer.document.text_extractor import extract_text
from pyquer.errors import InputError
from pyquer.models.analysis import AnalysisResult, Provider
from pyquer.models.paper import ParsedPaper, UploadedPaper
from pyquer.services.prompt_builder import assemble
from pyquer.services.provider_dispatcher import ProviderDispatcher
from pyquer.services.storage_service import FileStorage, cleanup_scope
from pyquer.utils.hashing import compute_sha256

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OCROptions:
    size: Tuple[int, int] = DEFAULT_PAGE_SIZE
    lang: str = "eng"
    max_workers: int = 2
    debug_dir: Optional[str] = None


class AnalysisPipeline:
    def __init__(
        self,
        storage: FileStorage,
        dispatcher: ProviderDispatcher,
        cache=None,
        history=None,
        ocr_options: Optional[OCROptions] = None,
    ):
        self.storage = storage
        self.dispatcher = dispatcher
        self.cache = cache
        self.history = history
        self.ocr_options = ocr_options or OCROptions()

    def parse_paper(self, uploaded: UploadedPaper) -> ParsedPaper:
        """Read a stored upload and produce its text, using OCR only when needed"""
        data = self.storage.read(uploaded.file_id)
        name = uploaded.original_name

        cache_key = None
        if self.cache is not None:
            cache_key = f"paper_text:{compute_sha256(data)}"
            cached = self.cache.get(cache_key)
            if isinstance(cached, dict) and "text" in cached:
                logger.info("Using cached text for %s", name)
                return self._parsed(uploaded, cached["text"], bool(cached.get("needs_ocr")))

        # The upload-time needsOCR flag is only a hint; the text layer decides
        result = extract_text(data, name)
        if result.usable:
            text = result.text
            needs_ocr = False
        else:
            logger.info("Direct extraction unusable for %s, falling back to OCR", name)
            text = self._ocr(data, uploaded)
            needs_ocr = True

        if cache_key is not None:
            self.cache.set(cache_key, {"text": text, "needs_ocr": needs_ocr})

        return self._parsed(uploaded, text, needs_ocr)

    def _ocr(self, data: bytes, uploaded: UploadedPaper) -> str:
        opts = self.ocr_options
        on_page = None
        if opts.debug_dir:
            prefix = os.path.splitext(uploaded.file_id)[0]
            on_page = debug_image_writer(opts.debug_dir, prefix=prefix)
        result = ocr_pdf(
            data,
            uploaded.original_name,
            size=opts.size,
            lang=opts.lang,
            max_workers=opts.max_workers,
            on_page=on_page,
        )
        if result.failed_pages:
            logger.warning(
                "OCR for %s degraded, pages without text: %s",
                uploaded.original_name, result.failed_pages,
            )
        return result.text

    @staticmethod
    def _parsed(uploaded: UploadedPaper, text: str, needs_ocr: bool) -> ParsedPaper:
        return ParsedPaper(
            text=text,
            subject=uploaded.subject,
            year=uploaded.year,
            original_name=uploaded.original_name,
            needs_ocr=needs_ocr,
        )

    def analyze(
        self,
        papers: Sequence[UploadedPaper],
        provider,
        user_id: Optional[int] = None,
    ) -> AnalysisResult:
        """
        Run the full analysis for an ordered list of uploaded papers.

        Input validation (empty list, unknown provider) happens before any
        file is read. Uploaded files are deleted when this returns or raises.
        """
        if not papers:
            raise InputError("At least one paper is required")
        selected = Provider.parse(provider)
        file_ids = [paper.file_id for paper in papers]

        with cleanup_scope(self.storage, file_ids):
            parsed: List[ParsedPaper] = []
            for index, paper in enumerate(papers, start=1):
                logger.info("Parsing paper %d/%d: %s", index, len(papers), paper.original_name)
                parsed.append(self.parse_paper(paper))

            assembled = assemble(parsed)
            analysis = self.dispatcher.dispatch(assembled.prompt, selected)

        result = AnalysisResult(
            analysis=analysis,
            provider_used=selected,
            timestamp=datetime.now(timezone.utc),
            prompt=assembled.prompt,
            papers_text=assembled.papers_text,
        )

        if user_id is not None and self.history is not None:
            self._save_history(user_id, parsed, result)

        return result

    def _save_history(self, user_id: int, parsed: Sequence[ParsedPaper], result: AnalysisResult):
        try:
            self.history.save_analysis(user_id, parsed, result)
        except Exception as e:
            logger.error("Failed to persist analysis history for user %s: %s", user_id, e)
