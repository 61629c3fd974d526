from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    database_url: str = "sqlite+aiosqlite:///./readmate.db"
    default_tz: str = "UTC"
    readmate_api_key: str | None = None
    log_level: str = "INFO"

    # Record keys in the durable store (same names the browser build used)
    goals_record_key: str = "reading_goals"
    progress_record_key: str = "goal_progress"
    books_record_key: str = "readmate_books"

    default_goal_pages: int = 20  # Pre-filled target for new goals

    model_config = {"env_file": ".env", "extra": "ignore"}


settings = Settings()
