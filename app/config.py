from pydantic import BaseModel
from pydantic_settings import BaseSettings


class SearchConfig(BaseModel):
    base_url: str
    max_retries: int = 2
    retry_delay: float = 3.0
    request_timeout: float = 90.0
    warmup_timeout: float = 15.0
    geo_timeout: float = 30.0
    destination_attempts: int = 3
    destination_retry_delay: float = 1.0
    destination_timeout: float = 10.0
    image_size: str = "640x400"


class Settings(BaseSettings):
    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    travel_api_url: str = "https://travelapi-bg6t.onrender.com"
    max_retries: int = 2
    retry_delay: float = 3.0
    request_timeout: float = 90.0
    warmup_timeout: float = 15.0
    geo_timeout: float = 30.0
    destination_attempts: int = 3
    destination_retry_delay: float = 1.0
    destination_timeout: float = 10.0
    image_size: str = "640x400"
    supabase_url: str = ""
    supabase_service_role_key: str = ""
    log_level: str = "INFO"

    def search_config(self) -> SearchConfig:
        return SearchConfig(
            base_url=self.travel_api_url.rstrip("/"),
            max_retries=max(1, self.max_retries),
            retry_delay=self.retry_delay,
            request_timeout=self.request_timeout,
            warmup_timeout=self.warmup_timeout,
            geo_timeout=self.geo_timeout,
            destination_attempts=max(1, self.destination_attempts),
            destination_retry_delay=self.destination_retry_delay,
            destination_timeout=self.destination_timeout,
            image_size=self.image_size,
        )
