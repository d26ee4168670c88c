from pydantic_settings import BaseSettings
from typing import List
import os

from .constants import DEFAULT_RADAR_NAME


class Settings(BaseSettings):
    APP_NAME: str = "Furuno Radar Decoder"
    RADAR_NAME: str = DEFAULT_RADAR_NAME
    UPLOAD_DIR: str = os.path.join(os.getcwd(), "furuno_app/storage/uploads")
    LOG_LEVEL: str = "INFO"

    # Reglas de upload
    ALLOWED_EXTENSIONS: List[str] = [".rhix", ".gz"]
    MAX_UPLOAD_MB: int = 200

    # Tamaño máximo de la cache de archivos decodificados
    DECODE_CACHE_MB: int = 256

    class Config:
        env_file = ".env"

settings = Settings()
