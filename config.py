import os
from dotenv import load_dotenv

# config.py

load_dotenv()

# IMPORTANT: This is a default secret key for development purposes ONLY.
# For production, use a strong, randomly generated key and load it from
# an environment variable or a secure configuration management system.
SECRET_KEY: str = os.getenv("SECRET_KEY", "your-super-secret-key-please-change-in-production")

ALGORITHM: str = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "30"))

# "development" or "production". Placeholder checks only run in production.
ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")

# External photo source (Picsum listing API)
PHOTO_SOURCE_BASE_URL: str = os.getenv("PHOTO_SOURCE_BASE_URL", "https://picsum.photos/v2")
PHOTO_SOURCE_TIMEOUT_SECONDS: float = float(os.getenv("PHOTO_SOURCE_TIMEOUT_SECONDS", "10"))

# Comma separated list of allowed origins for the frontend
CORS_ORIGINS: list[str] = [
    origin.strip() for origin in os.getenv("CORS_ORIGINS", "*").split(",") if origin.strip()
]

# Sentry Configuration
SENTRY_DSN: str = os.getenv("SENTRY_DSN", "your-sentry-dsn-goes-here") # Placeholder DSN

DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./photo_app.db")


def validate_configuration():
    """
    Validates that critical configuration variables are not set to their
    default placeholder values.
    Raises ValueError if any critical variable is a placeholder.
    """
    critical_vars_and_placeholders = {
        "SECRET_KEY": "your-super-secret-key-please-change-in-production",
        # SENTRY_DSN's placeholder is acceptable, it means Sentry is intentionally off.
        # DATABASE_URL's sqlite default is acceptable for local dev.
    }
    problematic_vars = []
    for var_name, placeholder in critical_vars_and_placeholders.items():
        current_value = globals().get(var_name)
        if current_value == placeholder:
            problematic_vars.append(
                f"{var_name} (is set to a default placeholder value: '{placeholder}' and must be changed)"
            )
        elif not current_value:
            problematic_vars.append(f"{var_name} (is missing or not loaded correctly)")

    if PHOTO_SOURCE_TIMEOUT_SECONDS <= 0:
        problematic_vars.append("PHOTO_SOURCE_TIMEOUT_SECONDS (must be a positive number of seconds)")

    if problematic_vars:
        raise ValueError(
            "Configuration problems found:\n - " + "\n - ".join(problematic_vars)
        )
