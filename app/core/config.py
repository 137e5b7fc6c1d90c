from os import getenv


class Settings:
    """Configuration lue depuis l'environnement.

    Une instance est construite explicitement puis injectée via get_settings(),
    les tests peuvent donc en fournir une autre.
    """

    def __init__(self, **overrides):
        self.PROJECT_NAME = getenv("PROJECT_NAME", "TaskQuadrant")
        self.LOG_LEVEL = getenv("LOG_LEVEL", "INFO")
        self.DATABASE_URL = getenv("DATABASE_URL", "postgresql+psycopg://taskquadrant:taskquadrant@db:5432/taskquadrant")

        self.JWT_SECRET = getenv("JWT_SECRET", "dev-secret-change-in-prod")
        self.JWT_EXPIRE_MIN = int(getenv("JWT_EXPIRE_MIN", "10080"))  # 7 jours
        self.JWT_REFRESH_EXPIRE_MIN = int(getenv("JWT_REFRESH_EXPIRE_MIN", "43200"))  # 30 jours
        self.ADMIN_TOKEN_EXPIRE_DAYS = int(getenv("ADMIN_TOKEN_EXPIRE_DAYS", "7"))

        self.CRON_SECRET = getenv("CRON_SECRET")  # None = pas de bypass cron

        self.STRIPE_SECRET_KEY = getenv("STRIPE_SECRET_KEY", "")
        self.STRIPE_CURRENCY = getenv("STRIPE_CURRENCY", "usd")

        self.PASSWORD_RESET_EXPIRE_MIN = int(getenv("PASSWORD_RESET_EXPIRE_MIN", "15"))
        self.DEFAULT_RETENTION_DAYS = int(getenv("DEFAULT_RETENTION_DAYS", "30"))

        # SMTP
        self.SMTP_SERVER = getenv("SMTP_SERVER")
        self.SMTP_PORT = int(getenv("SMTP_PORT", "587"))
        self.SMTP_EMAIL = getenv("SMTP_EMAIL")
        self.SMTP_PASSWORD = getenv("SMTP_PASSWORD")

        for key, value in overrides.items():
            setattr(self, key, value)


settings = Settings()


def get_settings() -> Settings:
    """Dépendance settings"""
    return settings
