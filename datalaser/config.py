"""
Application Settings — All via environment variables with sensible defaults.
"""
import os


class Settings:
    # ── Server ──
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "8002"))
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # ── CORS ──
    CORS_ORIGINS: str = os.getenv("CORS_ORIGINS", "http://localhost:3000,*")

    # ── Caller-side cost caps ──
    # Rows handed to a single tool call; larger payloads are truncated in file order.
    MAX_TOOL_ROWS: int = int(os.getenv("MAX_TOOL_ROWS", "50000"))
    # Upper bound for get_sample_rows.
    MAX_SAMPLE_ROWS: int = int(os.getenv("MAX_SAMPLE_ROWS", "20"))


settings = Settings()
