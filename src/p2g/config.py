from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    peloton_email: str = ""
    peloton_password: str = ""
    peloton_api_url: str = "https://api.onepeloton.com"
    garmin_upload: bool = True
    garmin_tokens_dir: Path = Path.home() / ".p2g" / "garmin_session"
    database_url: str = "sqlite:///./p2g.db"
    data_directory: Path = Path("./data")
    format_tcx: bool = True
    format_json: bool = False
    num_workouts: int = 5
    sync_hour: int = 3
    sync_minute: int = 0
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

    @property
    def working_directory(self) -> Path:
        """Raw Peloton downloads; wiped at the start of every run."""
        return self.data_directory / "working"

    @property
    def output_directory(self) -> Path:
        """Converted files, kept on disk as a manual-upload fallback."""
        return self.data_directory / "output"

    @property
    def upload_directory(self) -> Path:
        return self.output_directory / "upload"


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
