import os
from dotenv import load_dotenv

# pick up a local .env before reading the environment
load_dotenv()


class Settings:
    def __init__(self):
        self.DATABASE_URL = self._get_env("DATABASE_URL", "sqlite:///./voice_api.db")
        self.SEED_API_KEY = self._get_env("SEED_API_KEY", "sk_test_123456789")
        self.SEED_API_OWNER = self._get_env("SEED_API_OWNER", "Demo User")
        self.API_KEY_PREFIX = self._get_env("API_KEY_PREFIX", "sk_live_")
        self.LOG_LEVEL = self._get_env("LOG_LEVEL", "INFO").upper()
        self.RECENT_LOGS_LIMIT = int(self._get_env("RECENT_LOGS_LIMIT", "10"))

    def _get_env(self, key: str, default=None):
        value = os.getenv(key, default)
        if value is None or value == "":
            # fail at startup rather than on the first request
            raise ValueError(f"Environment variable {key} is missing or empty")
        return value


settings = Settings()
