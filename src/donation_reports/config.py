"""Configuration loading and persistence for donation reports."""

from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import Path
from typing import Optional

import yaml

from donation_reports.models.donation import DONATION_CATEGORIES
from donation_reports.models.goal import DonationGoal
from donation_reports.models.report import SectionSelection, Signatory
from donation_reports.processing.goal_progress import DEFAULT_GOAL_AMOUNT
from donation_reports.utils.decimal_utils import DEFAULT_CURRENCY_SYMBOL, parse_amount
from donation_reports.utils.logging_config import get_logger

logger = get_logger(__name__)


class ConfigError(Exception):
    """Exception raised for configuration errors."""

    pass


DEFAULT_CLOSING_STATEMENT = (
    "This report is certified true and correct based on the donation records "
    "maintained by the alumni association."
)


@dataclass
class StoreConfig:
    """Configuration for the donation store.

    Attributes:
        path: Path to the JSON donation store.
    """

    path: Path = field(default_factory=lambda: Path("data/donations.json"))

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> "StoreConfig":
        """Create from dictionary."""
        return cls(path=Path(str(data.get("path", "data/donations.json"))))


@dataclass
class ReportConfig:
    """Configuration for report content.

    Attributes:
        title: Document title.
        categories: Categories offered by the category filter.
        closing_statement: Fixed statement printed above the signatory block.
        header_image: URL or path of the banner image in the printed report.
        sections: Default section selection.
    """

    title: str = "Donation Report"
    categories: list[str] = field(default_factory=lambda: list(DONATION_CATEGORIES))
    closing_statement: str = DEFAULT_CLOSING_STATEMENT
    header_image: str = "header.png"
    sections: SectionSelection = field(default_factory=SectionSelection)

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> "ReportConfig":
        """Create from dictionary."""
        categories = data.get("categories", DONATION_CATEGORIES)
        if not isinstance(categories, list):
            raise ConfigError(f"'report.categories' must be a list, got {type(categories).__name__}")

        sections_data = data.get("sections") or {}
        if not isinstance(sections_data, dict):
            raise ConfigError("'report.sections' must be a mapping")

        return cls(
            title=str(data.get("title", "Donation Report")),
            categories=[str(c) for c in categories],
            closing_statement=str(data.get("closing_statement", DEFAULT_CLOSING_STATEMENT)),
            header_image=str(data.get("header_image", "header.png")),
            sections=SectionSelection.from_dict(sections_data),
        )


@dataclass
class OutputConfig:
    """Configuration for output generation.

    Attributes:
        currency_symbol: Currency glyph used in printed amounts.
        date_format: Date format for the generation timestamp.
        decimal_places: Number of decimal places.
    """

    currency_symbol: str = DEFAULT_CURRENCY_SYMBOL
    date_format: str = "%Y-%m-%d %H:%M"
    decimal_places: int = 2

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> "OutputConfig":
        """Create from dictionary."""
        return cls(
            currency_symbol=str(data.get("currency_symbol", DEFAULT_CURRENCY_SYMBOL)),
            date_format=str(data.get("date_format", "%Y-%m-%d %H:%M")),
            decimal_places=int(data.get("decimal_places", 2)),  # type: ignore[arg-type]
        )


@dataclass
class LoggingConfig:
    """Configuration for logging.

    Attributes:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        file: Path to log file.
    """

    level: str = "INFO"
    file: str = "donation_reports.log"

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> "LoggingConfig":
        """Create from dictionary."""
        return cls(
            level=str(data.get("level", "INFO")),
            file=str(data.get("file", "donation_reports.log")),
        )


@dataclass
class Config:
    """Main configuration container.

    Attributes:
        store: Donation store configuration.
        report: Report content configuration.
        output: Output formatting configuration.
        logging: Logging configuration.
        signatory: Signatory printed on the document.
        goals: Configured fundraising goals.
        goal_default_amount: Goal amount used when no goal applies.
    """

    store: StoreConfig = field(default_factory=StoreConfig)
    report: ReportConfig = field(default_factory=ReportConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    signatory: Signatory = field(default_factory=Signatory)
    goals: list[DonationGoal] = field(default_factory=list)
    goal_default_amount: Decimal = DEFAULT_GOAL_AMOUNT


def load_yaml_file(path: Path) -> dict[str, object]:
    """Load a YAML file.

    Args:
        path: Path to the YAML file.

    Returns:
        Parsed YAML content.

    Raises:
        FileNotFoundError: If file doesn't exist.
        ConfigError: If the file is invalid YAML or not a mapping.
    """
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    try:
        with open(path, encoding="utf-8") as f:
            content = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if content is None:
        return {}
    if not isinstance(content, dict):
        raise ConfigError(f"{path} must contain a mapping, got {type(content).__name__}")
    return content


def _section(data: dict[str, object], key: str) -> dict[str, object]:
    value = data.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigError(f"'{key}' must be a mapping, got {type(value).__name__}")
    return value


def load_goals(data: dict[str, object]) -> list[DonationGoal]:
    """Load fundraising goals from the 'goals' list of the settings."""
    goal_list = data.get("goals")
    if goal_list is None:
        return []
    if not isinstance(goal_list, list):
        raise ConfigError(f"'goals' must be a list, got {type(goal_list).__name__}")

    goals: list[DonationGoal] = []
    for goal_data in goal_list:
        try:
            goals.append(DonationGoal.from_dict(goal_data))
        except (KeyError, ValueError, TypeError) as e:
            raise ConfigError(f"Invalid goal {goal_data!r}: {e}") from e
    return goals


def load_config(
    settings_path: Optional[Path] = None,
    config_dir: Optional[Path] = None,
) -> Config:
    """Load configuration from settings.yaml.

    Args:
        settings_path: Path to settings.yaml (or None to use default).
        config_dir: Base config directory (default: ./config).

    Returns:
        Complete Config object; defaults when the file is missing.

    Raises:
        ConfigError: If the settings file is malformed.
    """
    if config_dir is None:
        config_dir = Path("config")
    if settings_path is None:
        settings_path = config_dir / "settings.yaml"

    config = Config()

    if not settings_path.exists():
        logger.warning(f"Settings file not found: {settings_path}, using defaults")
        return config

    data = load_yaml_file(settings_path)

    config.store = StoreConfig.from_dict(_section(data, "store"))
    config.report = ReportConfig.from_dict(_section(data, "report"))
    config.output = OutputConfig.from_dict(_section(data, "output"))
    config.logging = LoggingConfig.from_dict(_section(data, "logging"))
    config.signatory = Signatory.from_dict(_section(data, "signatory"))
    config.goals = load_goals(data)

    if "goal_default_amount" in data:
        try:
            config.goal_default_amount = parse_amount(data["goal_default_amount"])
        except ValueError as e:
            raise ConfigError(f"Invalid goal_default_amount: {e}") from e

    logger.info(f"Loaded settings from {settings_path}")
    return config


def save_signatory(path: Path, signatory: Signatory) -> None:
    """Persist the signatory block into settings.yaml.

    Other settings in the file are preserved.

    Args:
        path: Path to settings.yaml.
        signatory: Signatory to save.
    """
    data: dict[str, object] = load_yaml_file(path) if path.exists() else {}
    data["signatory"] = signatory.to_dict()

    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w", encoding="utf-8") as f:
        yaml.dump(data, f, default_flow_style=False, sort_keys=False, allow_unicode=True)

    logger.info(f"Saved signatory settings to {path}")
