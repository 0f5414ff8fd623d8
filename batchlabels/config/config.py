from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="BATCHLABELS_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    auth_token: str | None = None
    github_api_url: str = "https://api.github.com"
    app_version: str = "v0.1.0"

    @property
    def user_agent(self) -> str:
        return f"Batch Labels {self.app_version}"


settings = Settings()
