import os
from dotenv import load_dotenv

load_dotenv()


def _csv(value: str):
    return [item.strip() for item in value.split(",") if item.strip()]


class Settings:
    def __init__(self):
        self.HOST = os.getenv("HOST", "0.0.0.0")
        self.PORT = int(os.getenv("PORT", "3000"))

        self.LLM_PROVIDER = os.getenv("LLM_PROVIDER", "openai").lower()

        self.OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
        self.OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4-turbo-preview")

        self.GROQ_API_KEY = os.getenv("GROQ_API_KEY")
        self.GROQ_MODEL = os.getenv("GROQ_MODEL", "llama-3.1-8b-instant")

        # Bounds a single generation call, in seconds
        self.LLM_TIMEOUT = float(os.getenv("LLM_TIMEOUT", "60"))
        self.LLM_TEMPERATURE = float(os.getenv("LLM_TEMPERATURE", "0.3"))
        self.LLM_MAX_TOKENS = int(os.getenv("LLM_MAX_TOKENS", "4000"))

        self.CORS_ORIGINS = _csv(os.getenv("CORS_ORIGINS", "*"))
        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


settings = Settings()
