from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # --- Runtime ---
    ENV: str = "dev"  # dev|prod
    SALESOPS_DB_URL: str = "sqlite+aiosqlite:///./salesops.db"

    # --- Minimal B2B Auth (API key) ---
    # Send: X-API-Key: <key>
    API_KEY: str | None = None

    # --- Company registry (lead generator) ---
    # Keyed API is tried first; the public CNPJ.ws endpoint is the fallback.
    CASA_API_KEY: str | None = None
    CASA_BASE_URL: str = "https://api.casadosdados.com.br"
    CNPJ_WS_BASE_URL: str = "https://publica.cnpj.ws"

    LEADGEN_SOURCE: str = "registry"  # registry|stub_json
    LEADGEN_STUB_PATH: str = "data/stub_companies.json"
    LEADGEN_PREVIEW_LIMIT: int = 10
    LEADGEN_RUN_LIMIT: int = 100

    # --- Outbound HTTP resilience ---
    HTTP_TIMEOUT_S: float = 30.0
    HTTP_MAX_RETRIES: int = 2
    HTTP_BACKOFF_BASE_S: float = 0.5
    HTTP_RATE_LIMIT_RPS: float = 2.0
    HTTP_CIRCUIT_FAIL_THRESHOLD: int = 5
    HTTP_CIRCUIT_RESET_S: float = 60.0

    # --- Scheduler tuning ---
    PROPOSAL_AUTO_ACCEPT_DAYS: int = 7
    SCHED_PROPOSALS_INTERVAL_MINUTES: int = 60


settings = Settings()
