"""
Application configuration using pydantic-settings
"""

from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings"""

    # Application info
    app_name: str = "Pipeline Simulator"
    app_version: str = "1.0.0"
    debug: bool = False

    # Server settings
    host: str = "127.0.0.1"
    port: int = 8080

    # Simulation tuning
    step_duration_scale: float = 1.0  # 0 runs every step without waiting
    secondary_failure_rate: float = 0.1

    # Paths - deployments_file enables JSON persistence of deployment records
    base_dir: Path = Path(__file__).parent.parent
    data_dir: Path = base_dir / "data"
    deployments_file: Optional[Path] = None

    class Config:
        env_prefix = "PSIM_"
        env_file = ".env"


settings = Settings()
