import os

from pydantic_settings import BaseSettings, SettingsConfigDict

# Load .env file if it exists, for local development.
# In production, environment variables should be set directly.
if os.path.exists(".env"):
    from dotenv import load_dotenv
    load_dotenv()


class AppSettings(BaseSettings):
    name: str = "Survey Result Engine"
    log_level: str = "INFO"
    log_json: bool = True
    api_prefix: str = "/api/v1"

    model_config = SettingsConfigDict(env_prefix='APP_')


class DatabaseSettings(BaseSettings):
    url: str = "sqlite+aiosqlite:///./surveys.db"
    echo: bool = False

    model_config = SettingsConfigDict(env_prefix='DB_')


app_settings = AppSettings()
database_settings = DatabaseSettings()
