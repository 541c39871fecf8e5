import logging
from typing import Optional

import psycopg2
from psycopg2.extras import RealDictCursor

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS users (
    id SERIAL PRIMARY KEY,
    name VARCHAR(100) NOT NULL,
    email VARCHAR(255) NOT NULL UNIQUE,
    password_hash TEXT NOT NULL,
    role VARCHAR(20) NOT NULL DEFAULT 'user',
    is_active BOOLEAN NOT NULL DEFAULT TRUE,
    last_login TIMESTAMPTZ,
    created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

CREATE TABLE IF NOT EXISTS analysis_history (
    id SERIAL PRIMARY KEY,
    user_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    papers_info JSONB NOT NULL DEFAULT '[]',
    prompt TEXT NOT NULL,
    papers_text TEXT,
    analysis TEXT NOT NULL,
    model_used VARCHAR(20) NOT NULL CHECK (model_used IN ('gemini', 'mistral', 'cohere')),
    created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

CREATE INDEX IF NOT EXISTS idx_analysis_history_user ON analysis_history (user_id, created_at DESC);
"""


def get_db_connection(database_url: Optional[str]):
    """Get PostgreSQL connection"""
    if not database_url:
        logger.debug("DATABASE_URL not set, DB features disabled")
        return None
    try:
        return psycopg2.connect(database_url, cursor_factory=RealDictCursor)
    except Exception as e:
        logger.error("DB Connection failed: %s", e)
        return None


def init_schema(database_url: Optional[str]) -> bool:
    """Create tables if they do not exist"""
    conn = get_db_connection(database_url)
    if not conn:
        return False

    try:
        cur = conn.cursor()
        cur.execute(SCHEMA)
        conn.commit()
        logger.info("Database schema ready")
        return True
    except Exception as e:
        logger.error("Schema initialization failed: %s", e)
        return False
    finally:
        conn.close()
