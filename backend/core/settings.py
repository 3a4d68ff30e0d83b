import os
from typing import List
from dotenv import load_dotenv
from pydantic import BaseModel, Field

load_dotenv()

class _Settings(BaseModel):
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    OFFLINE_MODE: bool = os.getenv("OFFLINE_MODE", "false").lower() == "true"
    GEMINI_API_KEY: str = os.getenv("GEMINI_API_KEY", "")
    OPENAI_API_KEY: str = os.getenv("OPENAI_API_KEY", "")
    GEMINI_MODEL: str = os.getenv("GEMINI_MODEL", "gemini-1.5-pro")
    OPENAI_MODEL: str = os.getenv("OPENAI_MODEL", "gpt-4o-mini")
    AI_TIMEOUT_SECONDS: float = float(os.getenv("AI_TIMEOUT_SECONDS", "30"))
    MAX_UPLOAD_MB: int = int(os.getenv("MAX_UPLOAD_MB", "20"))
    # Reforma tributária (IVA dual) - alíquotas de transição estimadas
    CBS_RATE: float = float(os.getenv("CBS_RATE", "8.8"))
    IBS_RATE: float = float(os.getenv("IBS_RATE", "17.7"))
    IVA_CREDIT_FACTOR: float = float(os.getenv("IVA_CREDIT_FACTOR", "0.9"))
    ROUND_REFORM_STEPS: bool = os.getenv("ROUND_REFORM_STEPS", "true").lower() == "true"
    ALLOWED_MIME_PREFIXES: List[str] = Field(
        default=[
            "application/pdf",
            "image/jpeg",
            "image/png",
            "image/webp",
        ]
    )

    @property
    def ai_enabled(self) -> bool:
        return not self.OFFLINE_MODE and bool(self.GEMINI_API_KEY or self.OPENAI_API_KEY)

    @property
    def max_upload_bytes(self) -> int:
        return self.MAX_UPLOAD_MB * 1024 * 1024

settings = _Settings()
