"""Конфигурация приложения."""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Настройки приложения (переменные окружения MARVIN_*)."""

    model_config = SettingsConfigDict(env_prefix="MARVIN_", env_file=".env", extra="ignore")

    # Paths (относительные пути считаются от project_root)
    project_root: Path = Path(".")
    results_dir: Path = Path(".marvin/results")
    docs_root: str = "docs"

    # Checkers
    check_timeout_seconds: float = 60.0
    vale_path: str = "vale"
    markdownlint_path: str = "markdownlint"
    vale_min_alert_level: str = "suggestion"
    vale_glob: str = ""
    markdownlint_fix: bool = False

    # API
    page_size: int = 20
    log_level: str = "INFO"

    def resolved_project_root(self) -> Path:
        return self.project_root.expanduser().resolve()

    def resolved_results_dir(self) -> Path:
        if self.results_dir.is_absolute():
            return self.results_dir
        return self.resolved_project_root() / self.results_dir


@lru_cache
def get_settings() -> Settings:
    return Settings()
