from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    NODE_ENV: str = "development"
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = "postgres"
    POSTGRES_HOST: str = "localhost"
    POSTGRES_DATABASE: str = "lms"
    POSTGRES_PORT: str = "5432"  # Default port for PostgreSQL

    LOG_LEVEL: str = "INFO"

    # Generative AI configuration for assessment question generation
    OPENAI_API_KEY: str = ""
    LLM_MODEL_NAME: str = "gpt-5-mini"

    # Identity provider token verification
    AUTH_JWT_SECRET: str = "your-identity-provider-secret"
    AUTH_JWT_ALGORITHM: str = "HS256"
    AUTH_JWT_AUDIENCE: Optional[str] = None
    AUTH_JWT_ISSUER: Optional[str] = None
    # Dotted path of the claim holding the role, e.g. "public_metadata.role"
    AUTH_ROLE_CLAIM: str = "role"
    INSTRUCTOR_ROLE: str = "instructor"

    # Remote code execution sandbox (Judge0)
    JUDGE0_API_URL: str = "https://judge0-ce.p.rapidapi.com"
    JUDGE0_API_KEY: str = ""
    JUDGE0_API_HOST: str = "judge0-ce.p.rapidapi.com"
    JUDGE0_POLL_DELAY_SECONDS: float = 2.0

    # When False, a second submission for the same (student, assessment) is rejected
    ALLOW_RESUBMISSION: bool = True

    # CORS configuration - comma-separated list of allowed origins
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:3001"

    # Construct the full URL dynamically
    @property
    def POSTGRES_URL(self):
        return (
            f"postgresql://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DATABASE}"
        )

    model_config = SettingsConfigDict(
        env_file=".env.development", extra="ignore")


settings = Settings()
