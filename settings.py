"""
Runtime configuration: fiscal-year start month and the partner tier ladder.

Defaults live in code; FISCAL_YEAR_START_MONTH and PARTNER_TIERS_FILE may be
set in the environment or a .env file.
"""
import json
import logging
import os
from dataclasses import dataclass, field
from typing import Mapping, Optional

from dotenv import load_dotenv

from fiscal_calendar import FISCAL_YEAR_START_MONTH
from tiers import PARTNER_TIERS, TierConfigurationError, TierLadder

logger = logging.getLogger(__name__)


class ConfigError(ValueError):
    """Raised when environment configuration is invalid."""


@dataclass
class EngineConfig:
    fiscal_year_start_month: int = FISCAL_YEAR_START_MONTH
    ladder: TierLadder = field(default_factory=lambda: PARTNER_TIERS)


def default_config() -> EngineConfig:
    return EngineConfig(fiscal_year_start_month=FISCAL_YEAR_START_MONTH, ladder=PARTNER_TIERS)


def parse_start_month(raw: str) -> int:
    try:
        month = int(raw.strip())
    except ValueError:
        raise ConfigError(f"FISCAL_YEAR_START_MONTH must be an integer, got: {raw!r}")
    if not 1 <= month <= 12:
        raise ConfigError(f"FISCAL_YEAR_START_MONTH must be between 1 and 12, got: {month}")
    return month


def load_ladder(path: str) -> TierLadder:
    try:
        with open(path, encoding="utf-8") as fh:
            rows = json.load(fh)
    except OSError as e:
        raise ConfigError(f"Cannot read tier file {path}: {e}")
    except json.JSONDecodeError as e:
        raise ConfigError(f"Tier file {path} is not valid JSON: {e}")
    if not isinstance(rows, list) or not all(isinstance(r, dict) for r in rows):
        raise TierConfigurationError(f"Tier file {path} must contain a list of tier objects.")
    return TierLadder.from_records(rows)


def load_config(env: Optional[Mapping[str, str]] = None) -> EngineConfig:
    if env is None:
        load_dotenv()
        env = os.environ
    cfg = default_config()
    raw_month = env.get("FISCAL_YEAR_START_MONTH", "").strip()
    if raw_month:
        cfg.fiscal_year_start_month = parse_start_month(raw_month)
    tiers_file = env.get("PARTNER_TIERS_FILE", "").strip()
    if tiers_file:
        cfg.ladder = load_ladder(tiers_file)
        logger.info("Loaded %d partner tiers from %s", len(cfg.ladder), tiers_file)
    logger.info("Fiscal years start in month %d", cfg.fiscal_year_start_month)
    return cfg
