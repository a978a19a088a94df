from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment with defaults.

    Environment variable mapping follows pydantic's rules (e.g., APP_NAME, DEBUG, DATA_DIR, DB_FILENAME, CURRENCY_SUFFIX).
    """

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Basic app metadata
    app_name: str = "Fleet Expense Ledger"
    debug: bool = False
    version: str = "0.1.0"

    # Data & persistence
    data_dir: Path = Path("data")
    db_filename: str = "fleetledger.sqlite3"
    db_path: Optional[Path] = None  # derived if not provided

    # Rendering
    currency_suffix: str = "TL"

    # Expense form defaults; the ledger engine itself accepts any rate in [0, 100)
    default_vat_rate: float = 20.0
    form_vat_rate_min: float = 1.0
    form_vat_rate_max: float = 20.0

    def init_post_load(self) -> None:
        """Finalize derived fields and ensure directories exist."""
        if self.db_path is None:
            self.db_path = self.data_dir / self.db_filename
        # Ensure persistence directory exists
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        for name in ("form_vat_rate_min", "form_vat_rate_max", "default_vat_rate"):
            value = getattr(self, name)
            if not 0 <= value < 100:
                raise ValueError(f"{name} must be within [0, 100), got {value}")
        if self.form_vat_rate_min > self.form_vat_rate_max:
            raise ValueError(
                f"form_vat_rate_min ({self.form_vat_rate_min}) cannot exceed "
                f"form_vat_rate_max ({self.form_vat_rate_max})"
            )


@lru_cache
def get_settings() -> Settings:
    settings = Settings()
    settings.init_post_load()
    return settings
