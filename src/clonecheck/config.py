from dotenv import load_dotenv
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Optional
import json
import logging
import os

from clonecheck.constants import DEFAULT_HTML_PARSER

load_dotenv()  # Loads variables from .env file

logger = logging.getLogger(__name__)

THRESHOLD_ENV_PREFIX = "CLONECHECK_THRESHOLD_"


class Settings:
    """
    Process-wide settings read from the environment.
    """
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    LOG_FILE = os.getenv("LOG_FILE")
    HTML_PARSER = os.getenv("HTML_PARSER", DEFAULT_HTML_PARSER)
    THRESHOLDS_FILE = os.getenv("CLONECHECK_THRESHOLDS_FILE")


settings = Settings()


@dataclass
class VerificationThresholds:
    """Tunable limits used by snapshot comparison and QA checks.

    The attempt limit is not here: three attempts is part of the
    verification contract, see ``constants.MAX_VERIFICATION_ATTEMPTS``.
    """

    # Snapshot comparison
    min_text_length: int = 3  # Names this short are never reported missing
    text_preview_length: int = 100  # Truncation of expected text in differences

    # Data completeness
    min_completeness_text_length: int = 10
    missing_item_preview_length: int = 50

    # Runtime messages
    console_error_top_count: int = 5  # Categories named in fix suggestions

    @classmethod
    def field_names(cls) -> list[str]:
        return [f.name for f in fields(cls)]

    def _set(self, name: str, value: Any, source: str) -> None:
        try:
            coerced = int(value)
        except (TypeError, ValueError):
            logger.warning(f"Ignoring non-integer threshold {name}={value!r} from {source}")
            return
        if coerced < 0:
            logger.warning(f"Ignoring negative threshold {name}={coerced} from {source}")
            return
        setattr(self, name, coerced)

    @classmethod
    def from_env(cls) -> "VerificationThresholds":
        """Load thresholds from environment variables.

        Variables are the field name upper-cased behind the
        CLONECHECK_THRESHOLD_ prefix, e.g. CLONECHECK_THRESHOLD_MIN_TEXT_LENGTH=5.
        Unparsable values keep the default.
        """
        thresholds = cls()
        thresholds.apply_env()
        return thresholds

    def apply_env(self) -> "VerificationThresholds":
        """Override fields from CLONECHECK_THRESHOLD_* variables in place."""
        for name in self.field_names():
            env_key = f"{THRESHOLD_ENV_PREFIX}{name.upper()}"
            env_value = os.getenv(env_key)
            if env_value is not None:
                self._set(name, env_value, env_key)
        return self

    @classmethod
    def from_file(cls, path: str) -> "VerificationThresholds":
        """Load thresholds from a JSON configuration file.

        The file may hold the fields at the top level or under a
        ``thresholds`` key. Unknown keys are ignored.

        Args:
            path: Path to JSON configuration file

        Returns:
            VerificationThresholds; defaults if the file does not exist
        """
        thresholds = cls()
        file_path = Path(path)

        if not file_path.exists():
            logger.debug(f"No thresholds file at {file_path}, using defaults")
            return thresholds

        with open(file_path, 'r') as f:
            config = json.load(f)

        threshold_config = config.get('thresholds', config)

        for name in cls.field_names():
            if name in threshold_config:
                thresholds._set(name, threshold_config[name], str(file_path))

        return thresholds

    def to_dict(self) -> dict:
        return {name: getattr(self, name) for name in self.field_names()}

    def save_to_file(self, path: str) -> None:
        """Write thresholds as JSON under a ``thresholds`` key."""
        with open(path, 'w') as f:
            json.dump({'thresholds': self.to_dict()}, f, indent=2)


def load_thresholds(path: Optional[str] = None) -> VerificationThresholds:
    """Thresholds from a JSON file (if any) with environment overrides on top.

    Args:
        path: JSON file; defaults to CLONECHECK_THRESHOLDS_FILE

    Returns:
        VerificationThresholds
    """
    path = path or settings.THRESHOLDS_FILE
    thresholds = VerificationThresholds.from_file(path) if path else VerificationThresholds()
    return thresholds.apply_env()


# Used when a caller passes no thresholds
default_thresholds = VerificationThresholds()
