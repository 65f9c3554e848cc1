from os import getenv


def _as_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


class Settings:
    def __init__(self, **overrides):
        self.DATABASE_URL = getenv("DATABASE_URL", "postgresql+psycopg://taskhub:taskhub@db:5432/taskhub")
        self.JWT_SECRET = getenv("JWT_SECRET", "dev-secret-change-in-prod")
        self.JWT_EXPIRE_HOURS = int(getenv("JWT_EXPIRE_HOURS", "24"))  # token valable 24h
        self.BCRYPT_ROUNDS = int(getenv("BCRYPT_ROUNDS", "10"))
        self.UPLOAD_DIR = getenv("UPLOAD_DIR", "uploads")
        self.MAX_UPLOAD_SIZE = int(getenv("MAX_UPLOAD_SIZE", str(10 * 1024 * 1024)))  # 10 Mo
        self.CORS_ORIGINS = [o.strip() for o in getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
        self.LOG_LEVEL = getenv("LOG_LEVEL", "INFO")
        self.PORT = int(getenv("PORT", "3001"))
        # remettre completedBy/completedAt à vide quand une tâche quitte "Completed"
        self.CLEAR_COMPLETION_ON_REOPEN = _as_bool(getenv("CLEAR_COMPLETION_ON_REOPEN", "false"))

        # valeurs explicites (tests, create_app) prioritaires sur l'environnement
        for key, value in overrides.items():
            if not hasattr(self, key):
                raise AttributeError(f"Unknown setting: {key}")
            setattr(self, key, value)


settings = Settings()
