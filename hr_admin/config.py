from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):

    # Database
    database_url: str = "sqlite:///./hr_admin.db"


    # Auth/JWT
    access_token_expire_minutes: int = 30
    refresh_token_expire_days: int = 7
    jwt_algorithm: str = 'HS256'
    secret_key: str = "change-me"

    # Rate Limiting für Login
    rate_limit_enabled: bool = True
    login_rate_limit: str = "5/minute"

    # App
    app_name: str = 'HR Administration'
    debug: bool = False
    log_dir: str = "logs"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",

    )

    # Hierarchie: maximale Schritte beim Hochlaufen der Parent-Kette
    hierarchy_max_cycle_depth: int = 50
    hierarchy_max_path_depth: int = 20

    # Pagination
    default_page_size: int = 10
    max_page_size: int = 100


settings = Settings()
