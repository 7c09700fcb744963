import os
import datetime
from typing import List
from dotenv import load_dotenv

load_dotenv()


def _split_origins(raw: str) -> List[str]:
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


class Settings:
    DB_USER: str = os.getenv("DB_USER", "")
    DB_PASS: str = os.getenv("DB_PASS", "")
    DB_CLUSTER: str = os.getenv("DB_CLUSTER", "cluster0.vpupb.mongodb.net")
    MONGO_DB: str = os.getenv("MONGO_DB", "solo-db")

    ACCESS_TOKEN_SECRET: str = os.getenv("ACCESS_TOKEN_SECRET", "change-me")
    ALGORITHM = "HS256"
    TOKEN_COOKIE_NAME = "token"
    TOKEN_LIFETIME = datetime.timedelta(days=365)

    PORT: int = int(os.getenv("PORT", 5000))
    NODE_ENV: str = os.getenv("NODE_ENV", "development")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    CORS_ORIGINS: List[str] = _split_origins(
        os.getenv("CORS_ORIGINS", "http://localhost:5173,http://localhost:5174")
    )

    @property
    def MONGO_URI(self) -> str:
        uri = os.getenv("MONGO_URI")
        if uri:
            return uri
        return (
            f"mongodb+srv://{self.DB_USER}:{self.DB_PASS}@{self.DB_CLUSTER}/"
            "?retryWrites=true&w=majority&appName=Cluster0"
        )

    @property
    def production(self) -> bool:
        return self.NODE_ENV == "production"

settings = Settings()
