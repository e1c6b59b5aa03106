import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()

BASE_DIR = Path(__file__).resolve().parent.parent


def _data_dir() -> Path:
    raw = os.getenv("DOCSTORE_DATA_DIR")
    if not raw:
        return BASE_DIR / "data"
    p = Path(raw).expanduser()
    return p if p.is_absolute() else BASE_DIR / p


class Config:
    BASE_DIR = BASE_DIR
    DATA_DIR = _data_dir()
    LOG_LEVEL = os.getenv("DOCSTORE_LOG_LEVEL", "INFO").strip().upper()


class DevConfig(Config):
    DEBUG = True
    LOG_LEVEL = os.getenv("DOCSTORE_LOG_LEVEL", "DEBUG").strip().upper()


class ProdConfig(Config):
    DEBUG = False
