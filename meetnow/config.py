from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_name: str = "MeetNow"
    log_level: str = "INFO"

    # Optional Redis bridge for status-change events (None = in-process relay only)
    redis_url: str | None = None
    notification_channel: str = "order_status_events"

    # Simulated chat transport
    send_delay_ms: int = 800
    send_success_rate: float = 0.8  # first attempt
    retry_success_bonus: float = 0.1  # added per retry attempt
    max_send_retries: int = 3  # retries after the first send; then permanently failed

    max_confirmation_rejections: int = 3  # per order, then initiate is refused
    rating_delay_ms: int = 1000
    seed_mock_orders: bool = True

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()
