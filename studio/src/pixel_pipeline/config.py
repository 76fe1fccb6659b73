"""Engine configuration, loaded from an optional JSON file and the environment."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path

logger = logging.getLogger(__name__)

API_URL_ENV = "STUDIO_API_URL"


@dataclass(frozen=True)
class EngineConfig:
    api_url: str | None = None
    request_timeout: float = 10.0  # seconds, image fetch
    upload_timeout: float = 180.0  # seconds, edit submission
    extraction_count: int = 8
    quantize_method: str = "median_cut"


def load_config(path: str | Path | None = None) -> EngineConfig:
    """Load configuration, falling back to defaults for anything missing."""
    config = EngineConfig()

    if path is not None:
        config_path = Path(path)
        if config_path.exists():
            data = json.loads(config_path.read_text(encoding="utf-8"))
            if not isinstance(data, dict):
                raise ValueError(f"config file {config_path} must contain a JSON object")
            known = {f.name for f in fields(EngineConfig)}
            ignored = sorted(set(data) - known)
            if ignored:
                logger.warning("ignoring unknown config keys: %s", ", ".join(ignored))
            config = replace(config, **{k: v for k, v in data.items() if k in known})
            logger.debug("loaded configuration from %s", config_path)
        else:
            logger.debug("config file %s not found, using defaults", config_path)

    api_url = os.environ.get(API_URL_ENV)
    if api_url:
        config = replace(config, api_url=api_url)
    return config
