from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "Finance Coach API"
    openai_api_key: str = ""
    # any chat-completions model works; the prompt is plain text with no tools
    openai_model: str = "gpt-4o-mini"  # override via OPENAI_MODEL in .env if needed
    openai_base_url: str = "https://api.openai.com/v1"
    openai_timeout_seconds: float = 30.0
    database_url: str = ""
    # Comma-separated origins for CORS. "*" matches the browser client's preflight needs.
    cors_allow_origins: str = "*"
    jwt_secret_key: str
    jwt_algorithm: str = "HS256"
    # Tokens from the identity provider carry aud="authenticated"; empty disables the check.
    jwt_audience: str = "authenticated"
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore")

    @property
    def cors_origins(self) -> list[str]:
        return [origin.strip() for origin in self.cors_allow_origins.split(",") if origin.strip()]


settings = Settings()
