"""Ranking configuration loader with validation."""

import hashlib
from pathlib import Path

import structlog
import yaml
from pydantic import ValidationError

from feedrank.ranker.models import RankingConfig


logger = structlog.get_logger()


class ConfigValidationError(Exception):
    """Raised when ranking configuration validation fails."""

    def __init__(self, errors: list[dict[str, str]], file_path: str) -> None:
        """Initialize the error.

        Args:
            errors: List of validation error details.
            file_path: Path to the file that failed validation.
        """
        self.errors = errors
        self.file_path = file_path
        super().__init__(f"Validation failed for {file_path}: {len(errors)} errors")


def _flatten_errors(exc: ValidationError) -> list[dict[str, str]]:
    """Convert pydantic errors into location/message/type records."""
    return [
        {
            "loc": ".".join(str(part) for part in error["loc"]) or "<root>",
            "msg": error["msg"],
            "type": error["type"],
        }
        for error in exc.errors()
    ]


def load_ranking_config(path: Path | str) -> RankingConfig:
    """Load and validate a ranking configuration YAML file.

    The file mirrors RankingConfig::

        version: "1.1.0"
        weights:
          source_authority: 0.4
          recency: 0.3
          engagement: 0.2
          source_diversity: 0.1
        authority:
          - {pattern: laravel.com, score: 10}
          - {pattern: "blog.*", score: 5}
          - {pattern: default, score: 3}

    Omitted sections fall back to the compiled defaults.

    Args:
        path: Path to the YAML file.

    Returns:
        Validated RankingConfig.

    Raises:
        ConfigValidationError: If the file is missing, unparsable, or invalid.
    """
    file_path = Path(path)
    log = logger.bind(component="config", file_path=str(file_path))

    try:
        content = file_path.read_bytes()
    except FileNotFoundError as e:
        errors = [{"loc": "<file>", "msg": str(e), "type": "file_not_found"}]
        raise ConfigValidationError(errors, str(file_path)) from e

    try:
        parsed = yaml.safe_load(content.decode("utf-8")) or {}
    except yaml.YAMLError as e:
        errors = [{"loc": "<file>", "msg": str(e), "type": "yaml_parse_error"}]
        raise ConfigValidationError(errors, str(file_path)) from e

    try:
        config = RankingConfig.model_validate(parsed)
    except ValidationError as e:
        errors = _flatten_errors(e)
        log.warning("ranking_config_invalid", error_count=len(errors))
        raise ConfigValidationError(errors, str(file_path)) from e

    log.info(
        "ranking_config_loaded",
        version=config.version,
        authority_entries=len(config.authority),
        checksum=hashlib.sha256(content).hexdigest(),
    )
    return config
