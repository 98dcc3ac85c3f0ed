from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime settings pulled from environment variables or `.env`."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="CLIMSIM_",
        extra="ignore",
    )

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="json", description="Logging format (plain or json)")

    # Grid Configuration
    default_resolution_lat: int = Field(default=180, description="Default grid rows")
    default_resolution_lon: int = Field(default=360, description="Default grid columns")
    max_grid_cells: int = Field(default=720 * 360, description="Largest grid accepted")

    # Generation
    random_seed: int = Field(default=42, description="Seed for procedural maps")


settings = Settings()
