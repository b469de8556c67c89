"""
Application settings loaded from config/settings.yaml.

The file location can be overridden with EXTRATO_OFX_CONFIG and the log
level with EXTRATO_OFX_LOG_LEVEL. Missing files fall back to defaults.
"""
import os
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

import yaml

from extrato_ofx.parsing.config.extraction import ExtractionConfig

DEFAULT_CONFIG_PATH = Path(__file__).parent.parent.parent / "config" / "settings.yaml"


@dataclass
class Settings:
    log_level: str = "INFO"
    log_file: Optional[str] = "logs/app.log"
    cors_origins: List[str] = field(default_factory=lambda: [
        "http://localhost:5173",
        "http://localhost:3000",
        "http://127.0.0.1:5173",
    ])
    max_upload_mb: int = 20
    account_id: str = "XXXXXX"
    extraction: ExtractionConfig = field(default_factory=ExtractionConfig)

    @property
    def log_level_value(self) -> int:
        return getattr(logging, self.log_level.upper(), logging.INFO)


def load_settings(path: Optional[str] = None) -> Settings:
    """Read settings from YAML, applying environment overrides."""
    config_path = Path(path or os.getenv("EXTRATO_OFX_CONFIG") or DEFAULT_CONFIG_PATH)

    data = {}
    if config_path.exists():
        with open(config_path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}

    log_cfg = data.get("logging", {}) or {}
    api_cfg = data.get("api", {}) or {}
    ofx_cfg = data.get("ofx", {}) or {}

    settings = Settings(
        extraction=ExtractionConfig.from_dict(data.get("extraction")),
    )
    if "level" in log_cfg:
        settings.log_level = str(log_cfg["level"])
    if "file" in log_cfg:
        settings.log_file = log_cfg["file"]
    if "cors_origins" in api_cfg:
        settings.cors_origins = list(api_cfg["cors_origins"])
    if "max_upload_mb" in api_cfg:
        settings.max_upload_mb = int(api_cfg["max_upload_mb"])
    if "account_id" in ofx_cfg:
        settings.account_id = str(ofx_cfg["account_id"])

    env_level = os.getenv("EXTRATO_OFX_LOG_LEVEL")
    if env_level:
        settings.log_level = env_level

    return settings
