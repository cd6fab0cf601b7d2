import os


def _env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return value.strip()


class Settings:
    def __init__(self):
        # Backend REST API
        self.API_URL = _env("PUBLIC_API_URL", "http://localhost:3000").rstrip("/")
        self.API_TIMEOUT = float(_env("API_TIMEOUT", "15"))

        # Session cookie
        self.SECRET_KEY = _env(
            "AUTH_SECRET",
            "fallback-secret-for-development-only",
        )
        self.ALGORITHM = _env("AUTH_ALGORITHM", "HS256")
        self.SESSION_COOKIE_NAME = _env("SESSION_COOKIE_NAME", "gym_session")
        self.SESSION_MAX_AGE_MINUTES = int(_env("SESSION_MAX_AGE_MINUTES", "720"))

        # Auth0
        self.AUTH0_DOMAIN = _env("AUTH0_DOMAIN", "dummy.auth0.com")
        self.AUTH0_CLIENT_ID = _env("AUTH0_CLIENT_ID", "dummy-client-id")
        self.AUTH0_CLIENT_SECRET = _env("AUTH0_CLIENT_SECRET", "dummy-client-secret")
        self.AUTH0_AUDIENCE = _env("AUTH0_AUDIENCE", f"https://{self.AUTH0_DOMAIN}/api/v2/")
        self.AUTH0_SCOPE = _env("AUTH0_SCOPE", "openid profile email")
        self.AUTH0_REDIRECT_URI = _env(
            "AUTH0_REDIRECT_URI",
            "http://localhost:8000/auth/callback",
        )

        self.CORS_ORIGINS = [
            origin.strip()
            for origin in _env("CORS_ORIGINS", "*").split(",")
            if origin.strip()
        ]
        self.LOG_LEVEL = _env("LOG_LEVEL", "INFO").upper()

    @property
    def AUTH0_ISSUER(self) -> str:
        return f"https://{self.AUTH0_DOMAIN}"


settings = Settings()
