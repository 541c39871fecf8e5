import logging
from typing import List, Optional, Sequence

from psycopg2.extras import Json

from pyquer.clients.postgres_client import get_db_connection
from pyquer.models.analysis import AnalysisHistoryRecord, AnalysisResult
from pyquer.models.paper import ParsedPaper

logger = logging.getLogger(__name__)


def papers_info(papers: Sequence[ParsedPaper]) -> List[dict]:
    return [
        {
            "originalName": paper.original_name,
            "subject": paper.subject,
            "year": paper.year if isinstance(paper.year, int) else None,
            "needsOCR": paper.needs_ocr,
        }
        for paper in papers
    ]


class HistoryStore:
    """Analysis history in PostgreSQL. Writes are best-effort."""

    def __init__(self, database_url: Optional[str]):
        self.database_url = database_url

    @property
    def enabled(self) -> bool:
        return bool(self.database_url)

    def save_analysis(self, user_id: int, papers: Sequence[ParsedPaper], result: AnalysisResult) -> Optional[int]:
        """Persist one analysis; returns the row id, or None on any failure"""
        conn = get_db_connection(self.database_url)
        if not conn:
            return None

        try:
            cur = conn.cursor()
            cur.execute(
                """
                INSERT INTO analysis_history (user_id, papers_info, prompt, papers_text, analysis, model_used, created_at)
                VALUES (%s, %s, %s, %s, %s, %s, %s)
                RETURNING id
                """,
                (
                    user_id,
                    Json(papers_info(papers)),
                    result.prompt,
                    result.papers_text,
                    result.analysis,
                    result.provider_used.value,
                    result.timestamp,
                )
            )
            row = cur.fetchone()
            conn.commit()
            history_id = row["id"] if row else None
            logger.info("Saved analysis %s for user %s", history_id, user_id)
            return history_id
        except Exception as e:
            logger.error("Failed to save analysis history for user %s: %s", user_id, e)
            return None
        finally:
            conn.close()

    def get_user_history(self, user_id: int) -> List[AnalysisHistoryRecord]:
        """History for a user, newest first"""
        conn = get_db_connection(self.database_url)
        if not conn:
            return []

        try:
            cur = conn.cursor()
            cur.execute(
                """
                SELECT id, user_id, papers_info, prompt, papers_text, analysis, model_used, created_at
                FROM analysis_history
                WHERE user_id = %s
                ORDER BY created_at DESC
                """,
                (user_id,)
            )
            return [AnalysisHistoryRecord(**dict(row)) for row in cur.fetchall()]
        finally:
            conn.close()
