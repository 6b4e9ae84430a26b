from dataclasses import dataclass
import os
from dotenv import load_dotenv


load_dotenv()


def _split_csv(value: str) -> tuple[str, ...]:
    return tuple(item.strip() for item in value.split(",") if item.strip())


@dataclass(frozen=True)
class Settings:
    nexus_api_url: str = os.getenv("NEXUS_API_URL", "http://localhost:5000/api")
    nexus_api_timeout: float = float(os.getenv("NEXUS_API_TIMEOUT", "15"))
    log_level: str = os.getenv("NEXUS_LOG_LEVEL", "INFO")

    cors_allowed_origins: tuple[str, ...] = _split_csv(
        os.getenv("CORS_ALLOWED_ORIGINS", "http://localhost:5173,http://127.0.0.1:5173")
    )


settings = Settings()
