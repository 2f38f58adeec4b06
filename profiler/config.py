import os
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Union

from dotenv import load_dotenv

from profiler.exceptions import ConfigError
from profiler.recorder import Profiler
from profiler.utils import logger, setup_logging

LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")


@dataclass
class ProfilerConfig:
    """
    Profiler settings, usually read from the environment.
    """

    enabled: bool = False
    log_level: str = "INFO"
    log_file: Optional[Path] = None
    rotation: str = "10 MB"
    retention: str = "3 days"
    console: bool = True
    report_path: Optional[Path] = None

    def __post_init__(self):
        self.log_level = str(self.log_level).upper()
        if self.log_level not in LOG_LEVELS:
            raise ConfigError(
                f"Unknown log level: {self.log_level}",
                field_name="log_level",
                field_value=self.log_level,
            )
        if self.log_file is not None:
            self.log_file = Path(self.log_file)
        if self.report_path is not None:
            self.report_path = Path(self.report_path)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        for key in ("log_file", "report_path"):
            if data[key] is not None:
                data[key] = str(data[key])
        return data

    @classmethod
    def from_env(cls, env_path: Union[str, Path] = ".env") -> "ProfilerConfig":
        """Load settings from .env and environment variables."""
        if Path(env_path).exists():
            load_dotenv(dotenv_path=env_path)

        try:
            return cls(
                enabled=_parse_bool(os.getenv("PROFILER_ENABLED"), False),
                log_level=os.getenv("PROFILER_LOG_LEVEL", "INFO"),
                log_file=os.getenv("PROFILER_LOG_FILE") or None,
                rotation=os.getenv("PROFILER_LOG_ROTATION", "10 MB"),
                retention=os.getenv("PROFILER_LOG_RETENTION", "3 days"),
                console=_parse_bool(os.getenv("PROFILER_CONSOLE"), True),
                report_path=os.getenv("PROFILER_REPORT_PATH") or None,
            )
        except (ValueError, TypeError) as e:
            raise ConfigError(f"Invalid configuration value: {e}") from e


def _parse_bool(value: Optional[Union[str, bool]], default: bool = False) -> bool:
    """Parse a boolean from a string or bool."""
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    return str(value).lower() in ("true", "1", "yes", "y", "on")


def create_profiler(config: Optional[ProfilerConfig] = None, **enable_kwargs: Any) -> Profiler:
    """
    Configure logging and build a profiler from ``config``.

    The profiler's file sink (if any) is attached, and the profiler is enabled
    when ``config.enabled`` is set. ``enable_kwargs`` go to ``Profiler.enable``.
    """
    config = config or ProfilerConfig.from_env()

    setup_logging(log_level=config.log_level, console=config.console)

    profiler = Profiler()
    if config.log_file is not None:
        profiler.push_handler(
            config.log_file,
            level=config.log_level,
            rotation=config.rotation,
            retention=config.retention,
        )

    if config.enabled:
        profiler.enable(**enable_kwargs)
        logger.info(f"Profiler enabled (log file: {config.log_file or 'none'})")

    return profiler


def write_report(profiler: Profiler, config: ProfilerConfig) -> Optional[Path]:
    """Write the profiler's HTML report to ``config.report_path``, if configured."""
    if config.report_path is None:
        return None

    config.report_path.parent.mkdir(parents=True, exist_ok=True)
    config.report_path.write_text(profiler.get_html(), encoding="utf-8")
    logger.info(f"Profiler report written to {config.report_path}")
    return config.report_path


__all__ = [
    "ProfilerConfig",
    "create_profiler",
    "write_report",
    "LOG_LEVELS",
]
