import os
from typing import Annotated, List, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode

ASSETS_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "modules", "documents", "assets")


class Settings(BaseSettings):
    """
    Application settings, loaded from environment variables or a .env file.
    """
    # Database
    database_url: str = "sqlite:///./approvals.db"

    # Stored documents
    upload_dir: str = "uploads"
    uploads_url_prefix: str = "/uploads"
    max_file_size: int = 10 * 1024 * 1024  # 10 MB

    # Base URL used to build the simulated approval links
    public_base_url: str = "http://localhost:8000"

    cors_origins: Annotated[List[str], NoDecode] = ["*"]
    log_level: str = "INFO"

    # PDF assets
    assets_dir: str = ASSETS_DIR
    stamp_font_path: Optional[str] = None

    case_id_retries: int = 3
    seed_predefined_approvers: bool = True

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @field_validator("cors_origins", mode="before")
    def _split_cors_origins(cls, v):
        """
        Allows CORS_ORIGINS as comma-separated string in env, or as a list.
        """
        if isinstance(v, str):
            return [s.strip() for s in v.split(",") if s.strip()]
        return v

    @field_validator("case_id_retries")
    def _validate_retries(cls, v):
        if v < 1:
            raise ValueError("CASE_ID_RETRIES must be at least 1")
        return v

    @field_validator("public_base_url", "uploads_url_prefix")
    def _strip_trailing_slash(cls, v):
        return v.rstrip("/")


settings = Settings()
