from typing import List

from pydantic_settings import BaseSettings
from dotenv import load_dotenv

load_dotenv()

class Settings(BaseSettings):
    DATABASE_URL: str
    ENV: str = "local"  # Environment setting
    LOG_LEVEL: str = "INFO"

    # Shared admin console secret
    ADMIN_PASSWORD: str = "admin123"

    # First-contact message for new sessions
    GREETING_TEXT: str = "Hello, how can I help you?"

    CORS_ORIGINS: List[str] = ["*"]

    # Push delivery (Expo push service)
    PUSH_API_URL: str = "https://exp.host/--/api/v2/push/send"
    PUSH_TITLE: str = "New message from support"
    PUSH_SOUND: str = "default"
    PUSH_IMAGE_BODY: str = "Sent you an image"
    PUSH_TIMEOUT_SECONDS: float = 10.0
    NOTIFICATION_DRAIN_SECONDS: float = 5.0

    class Config:
        env_file = ".env"

settings = Settings()
