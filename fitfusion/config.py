from __future__ import annotations

import os
from pathlib import Path
from typing import List


class Settings:
    """Process-wide FitFusion configuration, read once from the environment."""

    def __init__(self) -> None:
        env = os.environ

        # ---- storage ----
        self.data_root: Path = Path(
            env.get("FITFUSION_DATA_ROOT") or Path(__file__).resolve().parent.parent / "data"
        ).expanduser()
        self.db_path: Path = Path(env.get("FITFUSION_DB_PATH") or self.data_root / "fitfusion.db").expanduser()
        # Seconds a writer waits on the SQLite write lock before giving up.
        self.db_timeout: float = float(env.get("FITFUSION_DB_TIMEOUT") or "10")

        # ---- auth / logging ----
        # Must equal the signing secret of the auth service in any real deployment.
        self.jwt_secret: str = env.get("FITFUSION_JWT_SECRET") or "dev-secret-change-me"
        self.log_level: str = (env.get("FITFUSION_LOG_LEVEL") or "INFO").upper()

        # ---- Gemini ----
        self.gemini_api_key: str | None = env.get("GEMINI_API_KEY") or None
        self.gemini_base_url: str = env.get("GEMINI_BASE_URL", "https://generativelanguage.googleapis.com/v1beta")
        self.gemini_model: str = env.get("GEMINI_MODEL", "gemini-1.5-flash")
        self.gemini_timeout: float = float(env.get("GEMINI_TIMEOUT", "30"))
        self.gemini_temperature: float = float(env.get("GEMINI_TEMPERATURE", "0.4"))
        self.gemini_max_tokens: int = int(env.get("GEMINI_MAX_TOKENS", "2048"))

        # ---- http ----
        origins = [o.strip() for o in env.get("CORS_ORIGINS", "*").split(",") if o.strip()]
        self.cors_origins: List[str] = origins or ["*"]


settings = Settings()
