"""Configuration management using pydantic-settings."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    database_path: str = "./data/gatehouse.db"
    cors_origins: list[str] = ["http://localhost:3000"]

    # Flask session signing (holds the challenge scope id)
    secret_key: str = "change-me-in-production-session-key"

    # JWT Configuration
    jwt_secret_key: str = "change-me-in-production-use-env-var"
    jwt_algorithm: str = "HS256"
    jwt_expiry_seconds: int = 7 * 24 * 60 * 60

    # Clients present tokens as "<token_prefix> <token>" in token_header
    token_prefix: str = "Bearer"
    token_header: str = "Authorization"

    # Bcrypt work factor (higher = more secure but slower)
    # For tests, use 4 for faster execution while maintaining functionality
    bcrypt_work_factor: int = 12

    # Login challenge codes
    challenge_ttl_seconds: int = 300
    challenge_length: int = 4
    # When True a stored code is discarded on the first verification attempt,
    # whether or not it matched
    challenge_one_shot: bool = True

    # Optional principal created by `python -m gatehouse.db.seed`
    bootstrap_admin_username: str = "admin"
    bootstrap_admin_password: str | None = None

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False
    )


settings = Settings()
