"""
MODULE OVERVIEW:
Application-wide configuration using Pydantic Settings.

WHAT IS HAPPENING HERE:
Every timing and endpoint the ranking client depends on is declared once here.
The snapshot page size and the reconnect delay are construction-time defaults for
`RankStreamClient`; the API base comes from the deployment environment (or `.env`).
The demo server reads its port and churn interval from the same object.
"""
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    PORT: int = 8000
    LOG_LEVEL: str = "INFO"

    # REST + stream base. Empty means "same origin": the stream URL stays relative.
    API_BASE_URL: str = ""
    API_TIMEOUT_S: float = 10.0

    # Snapshot
    RANK_PAGE_SIZE: int = 20

    # Stream
    STREAM_RECONNECT_DELAY_S: float = 5.0
    SSE_HEARTBEAT_INTERVAL_S: float = 15.0

    # Demo server
    RANK_UPDATE_INTERVAL_S: float = 3.0

    class Config:
        env_file = ".env"
        # Tolerate missing env vars to allow easy out-of-the-box execution
        env_file_encoding = 'utf-8'
        extra = 'ignore'

settings = Settings()
