"""Configuration and constants for Domo."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

from domo.errors import ConfigError

# Paths
PROJECT_ROOT = Path(__file__).parent.parent.parent
DEFAULT_DATA_DIR = PROJECT_ROOT / "data"
DEFAULT_DB_PATH = DEFAULT_DATA_DIR / "domo.db"
ENV_FILE_PATH = PROJECT_ROOT / ".env"

DEFAULT_SITE_NAME = "Domo"

# Objectives that write Domo Score data
PRODUCT_INTEREST_OBJECTIVE = "product_interest_discovery"
CONTACT_OBJECTIVES = {"contact_information_collection", "greeting_and_qualification"}
VIDEO_SHOWCASE_OBJECTIVE = "demo_video_showcase"
DEFAULT_VIDEO_SHOWCASE_NAME = "video_showcase"

# Vendor event types
OBJECTIVE_COMPLETED_EVENTS = {
    "application.objective_completed",
    "objective_completed",
    "conversation.objective.completed",
}
CONVERSATION_ENDED_EVENTS = {
    "conversation.ended",
    "conversation_ended",
    "application.conversation_ended",
    "conversation.completed",
    "conversation_completed",
    "application.conversation_completed",
}
TRANSCRIPTION_READY_EVENT = "application.transcription_ready"
PERCEPTION_ANALYSIS_EVENT = "application.perception_analysis"

# Tools the agent may call during a conversation
KNOWN_TOOLS = [
    "fetch_video",
    "pause_video",
    "play_video",
    "next_video",
    "close_video",
    "show_trial_cta",
]

# Webhook headers
WEBHOOK_SECRET_HEADER = "x-webhook-secret"
WEBHOOK_SIGNATURE_HEADER = "x-tavus-signature"


@dataclass
class DomoConfig:
    """Runtime configuration for the web service and CLI."""

    db_path: Path = field(default_factory=lambda: DEFAULT_DB_PATH)
    webhook_secret: str = ""
    log_level: str = "INFO"
    site_name: str = DEFAULT_SITE_NAME

    @property
    def data_dir(self) -> Path:
        return self.db_path.parent

    @property
    def requires_webhook_auth(self) -> bool:
        return bool(self.webhook_secret)

    def ensure_dirs(self):
        """Create the data directory if it doesn't exist."""
        self.data_dir.mkdir(parents=True, exist_ok=True)


def _parse_log_level(raw: str) -> str:
    level = raw.strip().upper()
    if not isinstance(logging.getLevelName(level), int):
        raise ConfigError(f"Unknown log level: {raw}")
    return level


def load_config(db_path: str | Path | None = None) -> DomoConfig:
    """Load config from the environment (and .env). An explicit db_path wins."""
    load_dotenv(ENV_FILE_PATH, override=False)

    if db_path is None:
        env_db = os.environ.get("DOMO_DB_PATH")
        db_path = Path(env_db) if env_db else DEFAULT_DB_PATH

    return DomoConfig(
        db_path=Path(db_path),
        webhook_secret=os.environ.get("DOMO_WEBHOOK_SECRET", ""),
        log_level=_parse_log_level(os.environ.get("DOMO_LOG_LEVEL", "INFO")),
        site_name=os.environ.get("DOMO_SITE_NAME", DEFAULT_SITE_NAME),
    )
