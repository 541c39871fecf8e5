import os
from dotenv import load_dotenv

load_dotenv()

class Config:
    # Provider Configuration
    GEMINI_API_KEY = os.getenv("GEMINI_API_KEY", "") or None
    GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-1.5-flash")
    MISTRAL_API_KEY = os.getenv("MISTRAL_API_KEY", "") or None
    MISTRAL_MODEL = os.getenv("MISTRAL_MODEL", "mistral-large-latest")
    MISTRAL_API_URL = os.getenv("MISTRAL_API_URL", "https://api.mistral.ai/v1/chat/completions")
    COHERE_API_KEY = os.getenv("COHERE_API_KEY", "") or None
    COHERE_MODEL = os.getenv("COHERE_MODEL", "command-r-plus")
    COHERE_API_URL = os.getenv("COHERE_API_URL", "https://api.cohere.com/v2/chat")
    LLM_TIMEOUT_SECONDS = float(os.getenv("LLM_TIMEOUT_SECONDS", "120"))

    # Upload / OCR Configuration
    UPLOAD_DIR = os.getenv("UPLOAD_DIR", "uploads")
    OCR_LANG = os.getenv("OCR_LANG", "eng")
    OCR_MAX_WORKERS = int(os.getenv("OCR_MAX_WORKERS", "2"))
    OCR_PAGE_WIDTH = int(os.getenv("OCR_PAGE_WIDTH", "2200"))
    OCR_PAGE_HEIGHT = int(os.getenv("OCR_PAGE_HEIGHT", "3000"))
    OCR_DEBUG_DIR = os.getenv("OCR_DEBUG_DIR", "") or None

    # Database Configuration
    DATABASE_URL = os.getenv("DATABASE_URL")

    # Redis Configuration
    REDIS_HOST = os.getenv("REDIS_HOST", "localhost")
    REDIS_PORT = int(os.getenv("REDIS_PORT", "6379"))
    REDIS_PASSWORD = os.getenv("REDIS_PASSWORD", "") or None
    REDIS_ENABLED = os.getenv("REDIS_ENABLED", "false").lower() == "true"
    CACHE_TTL = int(os.getenv("CACHE_TTL", "86400"))  # 1 day default

    # Auth Configuration
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "change-me")
    JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
    JWT_EXPIRE_DAYS = int(os.getenv("JWT_EXPIRE_DAYS", "30"))

    # CORS Configuration
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:3000").split(",")

    # Server Configuration
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
    PORT = int(os.getenv("PORT", "5000"))

    @property
    def ocr_page_size(self):
        return (self.OCR_PAGE_WIDTH, self.OCR_PAGE_HEIGHT)

    @classmethod
    def validate(cls):
        """Validate required configuration"""
        if not (cls.GEMINI_API_KEY or cls.MISTRAL_API_KEY or cls.COHERE_API_KEY):
            raise ValueError(
                "At least one of GEMINI_API_KEY, MISTRAL_API_KEY or COHERE_API_KEY is required"
            )
        return True

config = Config()
