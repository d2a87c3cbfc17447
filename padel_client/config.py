from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path
import sys


class ConfigurationError(ValueError):
    pass


_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}
_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


@dataclass(frozen=True)
class AppSettings:
    api_url: str
    api_prefix: str
    timeout_seconds: int
    storage_dir: str
    secure_storage: bool
    log_level: str

    @property
    def base_url(self) -> str:
        return f"{self.api_url}{self.api_prefix}"

    @property
    def secure_storage_dir(self) -> str:
        return os.path.join(self.storage_dir, "secure")

    @property
    def data_storage_dir(self) -> str:
        return os.path.join(self.storage_dir, "data")

    @staticmethod
    def from_env() -> "AppSettings":
        _load_dotenv_if_present()

        api_url = os.getenv("PADEL_API_URL", "http://10.0.2.2:1337").strip().rstrip("/")
        api_prefix = os.getenv("PADEL_API_PREFIX", "/api").strip().rstrip("/")

        raw_timeout = os.getenv("PADEL_TIMEOUT_SECONDS", "30").strip()
        try:
            timeout_seconds = int(raw_timeout)
        except ValueError as error:
            raise ConfigurationError(
                f"PADEL_TIMEOUT_SECONDS must be an integer, got {raw_timeout!r}"
            ) from error

        default_storage_dir = os.path.join(
            os.getenv("LOCALAPPDATA", str(Path.home())),
            ".padel_client",
        )
        storage_dir = os.getenv("PADEL_STORAGE_DIR", default_storage_dir).strip()

        secure_storage = _parse_bool("PADEL_SECURE_STORAGE", os.getenv("PADEL_SECURE_STORAGE", "true"))
        log_level = os.getenv("PADEL_LOG_LEVEL", "INFO").strip().upper()

        settings = AppSettings(
            api_url=api_url,
            api_prefix=api_prefix,
            timeout_seconds=timeout_seconds,
            storage_dir=storage_dir,
            secure_storage=secure_storage,
            log_level=log_level,
        )
        settings.validate()
        return settings

    def validate(self) -> None:
        problems = []
        if not self.api_url:
            problems.append("PADEL_API_URL is required")
        elif not self.api_url.startswith(("http://", "https://")):
            problems.append("PADEL_API_URL must start with http:// or https://")

        if self.api_prefix and not self.api_prefix.startswith("/"):
            problems.append("PADEL_API_PREFIX must start with '/'")

        if self.timeout_seconds <= 0:
            problems.append("PADEL_TIMEOUT_SECONDS must be greater than 0")

        if not self.storage_dir:
            problems.append("PADEL_STORAGE_DIR must not be empty")

        if self.log_level not in _LOG_LEVELS:
            problems.append("PADEL_LOG_LEVEL must be one of: " + ", ".join(sorted(_LOG_LEVELS)))

        if problems:
            raise ConfigurationError("Invalid settings: " + "; ".join(problems))


def _parse_bool(name: str, raw_value: str) -> bool:
    value = raw_value.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"{name} must be a boolean (true/false), got {raw_value!r}")


def _load_dotenv_if_present(file_name: str = ".env") -> None:
    """Fill unset variables from ``PADEL_ENV_FILE``, then ``./.env``, then the install directory's ``.env``.

    Values already in the environment win, and an earlier file wins over a later one.
    """
    for candidate in _candidate_env_files(file_name):
        for key, value in _read_env_file(candidate).items():
            os.environ.setdefault(key, value)


def _candidate_env_files(file_name: str) -> list[Path]:
    explicit = os.getenv("PADEL_ENV_FILE", "").strip()
    if getattr(sys, "frozen", False):
        install_dir = Path(sys.executable).resolve().parent
    else:
        install_dir = Path(__file__).resolve().parent.parent

    candidates = [Path(explicit).expanduser()] if explicit else []
    candidates += [Path.cwd() / file_name, install_dir / file_name]

    by_location: dict[str, Path] = {}
    for path in candidates:
        by_location.setdefault(str(path.resolve()) if path.exists() else str(path), path)
    return list(by_location.values())


def _read_env_file(path: Path) -> dict[str, str]:
    """Parse ``KEY=value`` lines; blank lines, comments and unreadable files yield nothing."""
    values: dict[str, str] = {}
    try:
        lines = path.read_text(encoding="utf-8").splitlines()
    except OSError:
        return values

    for raw_line in lines:
        line = raw_line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = (part.strip() for part in line.split("=", 1))
        if key:
            values.setdefault(key, value.strip('"').strip("'"))
    return values
