import os



def _get_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _get_list(value: str | None, default: list[str]) -> list[str]:
    if not value:
        return default
    return [item.strip() for item in value.split(",") if item.strip()]

APP_ENV = os.getenv("APP_ENV", "development")
APP_DEBUG = _get_bool(os.getenv("APP_DEBUG"), default=False)
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

CORS_ALLOWED_ORIGINS = _get_list(
    os.getenv("CORS_ALLOWED_ORIGINS"),
    default=["http://localhost:5173", "http://localhost:8080"],
)

JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "change-me")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
JWT_EXPIRES_MINUTES = int(os.getenv("JWT_EXPIRES_MINUTES", "60"))

# Candidate days tried before a department is reported fully booked.
SCHEDULING_MAX_ATTEMPT_DAYS = int(os.getenv("SCHEDULING_MAX_ATTEMPT_DAYS", "7"))
QUEUE_ASSIGNMENT_RETRIES = int(os.getenv("QUEUE_ASSIGNMENT_RETRIES", "5"))

def validate_runtime_config() -> None:
    if APP_ENV.lower() == "production" and JWT_SECRET_KEY == "change-me":
        raise RuntimeError("JWT_SECRET_KEY must be set in production.")
    if SCHEDULING_MAX_ATTEMPT_DAYS < 1:
        raise RuntimeError("SCHEDULING_MAX_ATTEMPT_DAYS must be at least 1.")
    if QUEUE_ASSIGNMENT_RETRIES < 1:
        raise RuntimeError("QUEUE_ASSIGNMENT_RETRIES must be at least 1.")
