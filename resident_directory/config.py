import os
from pydantic import BaseModel


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


class Settings(BaseModel):
    environment: str = os.getenv("ENVIRONMENT", "local")
    db_user: str = os.getenv("DB_USER", "app")
    db_password: str = os.getenv("DB_PASSWORD", "app")
    db_host: str = os.getenv("DB_HOST", "localhost")
    db_port: int = int(os.getenv("DB_PORT", "5432"))
    db_name: str = os.getenv("DB_NAME", "residents")
    database_url_override: str = os.getenv("DATABASE_URL", "")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_json: bool = _flag("LOG_JSON", "false")
    seed_admin_password: str = os.getenv("SEED_ADMIN_PASSWORD", "")
    seed_viewer_password: str = os.getenv("SEED_VIEWER_PASSWORD", "")
    seed_sample_residents: bool = _flag("SEED_SAMPLE_RESIDENTS", "true")

    def database_url(self) -> str:
        if self.database_url_override:
            return self.database_url_override
        return f"postgresql+psycopg2://{self.db_user}:{self.db_password}@{self.db_host}:{self.db_port}/{self.db_name}"

    def seed_password_overrides(self) -> dict[str, str]:
        overrides = {}
        if self.seed_admin_password:
            overrides["admin@example.com"] = self.seed_admin_password
        if self.seed_viewer_password:
            overrides["viewer@example.com"] = self.seed_viewer_password
        return overrides

settings = Settings()
