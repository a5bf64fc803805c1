"""Process-level setup: environment, logging, and a configured pipeline."""

from __future__ import annotations

import logging

from dotenv import load_dotenv

from curvesight.config import Settings, settings
from curvesight.engine.pipeline import Pipeline, create_pipeline


def configure_logging(cfg: Settings | None = None) -> None:
    cfg = cfg or settings
    logging.basicConfig(
        level=getattr(logging, cfg.log_level.upper(), logging.INFO),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )


def create_app_pipeline(cfg: Settings | None = None) -> Pipeline:
    """Load .env, configure logging, build a pipeline from the environment."""
    load_dotenv()
    cfg = cfg or Settings()
    configure_logging(cfg)
    return create_pipeline(cfg.pipeline_config())
