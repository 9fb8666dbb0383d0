from dotenv import load_dotenv
from typing import Optional
import logging
import os

# Load environment variables
load_dotenv()


def _as_bool(value: Optional[str], default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Settings:
    """Runtime configuration read from the environment (and .env)."""

    def __init__(self):
        self.mongodb_url = os.getenv('MONGODB_URL')
        self.database_name = os.getenv('DATABASE_NAME', 'clinic_db')

        # Generative text is optional; without a key the summarizer falls back
        self.gemini_api_key = os.getenv('GEMINI_API_KEY') or None
        self.gemini_model = os.getenv('GEMINI_MODEL', 'gemini-3-flash-preview')
        self.gemini_base_url = os.getenv('GEMINI_BASE_URL', 'https://generativelanguage.googleapis.com')

        # Messaging is optional as well
        self.twilio_account_sid = os.getenv('TWILIO_ACCOUNT_SID') or None
        self.twilio_auth_token = os.getenv('TWILIO_AUTH_TOKEN') or None
        self.twilio_whatsapp_number = os.getenv('TWILIO_WHATSAPP_NUMBER') or None
        self.admin_whatsapp_number = os.getenv('ADMIN_WHATSAPP_NUMBER') or None
        self.clinic_name = os.getenv('CLINIC_NAME', 'Serenity Massage')

        self.session_ttl_minutes = int(os.getenv('SESSION_TTL_MINUTES', '480'))
        self.session_cookie_secure = _as_bool(os.getenv('SESSION_COOKIE_SECURE'))
        self.realtime_enabled = _as_bool(os.getenv('REALTIME_ENABLED'), default=True)

        self.log_level = os.getenv('LOG_LEVEL', 'INFO').upper()
        self.log_file = os.getenv('LOG_FILE') or None
        self.port = int(os.environ.get("PORT", "10000"))

    @property
    def messaging_configured(self) -> bool:
        return all([self.twilio_account_sid, self.twilio_auth_token, self.twilio_whatsapp_number])


def setup_logging(settings: Settings) -> None:
    handlers = [logging.StreamHandler()]
    if settings.log_file:
        handlers.append(logging.FileHandler(settings.log_file))

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers
    )
