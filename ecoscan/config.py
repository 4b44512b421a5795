import os
from dataclasses import dataclass, field
from typing import List
from dotenv import load_dotenv

load_dotenv()

@dataclass
class Settings:
    ENV: str = os.getenv("ENV", "development")
    CLASSIFIER_BACKEND: str = os.getenv("CLASSIFIER_BACKEND", "mobilenet")  # 'mobilenet' or 'none'
    MODEL_WEIGHTS_PATH: str = os.getenv("MODEL_WEIGHTS_PATH", "")
    DATA_DIR: str = os.getenv("DATA_DIR", "data")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    ALLOW_ORIGINS: List[str] = field(default_factory=lambda: os.getenv("ALLOW_ORIGINS", "http://localhost:8000,http://127.0.0.1:8000").split(","))

settings = Settings()
