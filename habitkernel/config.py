from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    kernel_api_key: str | None = None

    # Logging
    log_level: str = "INFO"
    log_json: bool = False  # JSON renderer instead of the console one

    # Tracking schema. None = built-in default schema.
    schema_path: str | None = None
    daily_goals_section: str = "Daily Goals"
    monthly_goals_section: str = "Monthly Goals"

    model_config = {"env_file": ".env", "extra": "ignore"}


settings = Settings()
