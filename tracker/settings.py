import os
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class Settings:
    data_dir: Path
    db_path: Path
    log_level: str = "INFO"


def get_settings() -> Settings:
    data_dir = Path(os.getenv("TRACKER_DATA_DIR") or Path.cwd() / ".data")
    return Settings(
        data_dir=data_dir,
        db_path=data_dir / "tracker.sqlite",
        log_level=os.getenv("TRACKER_LOG_LEVEL", "INFO"),
    )
