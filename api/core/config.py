# core/config.py
"""
Runtime configuration for the scripture API.

Environment values come from .env (python-dotenv); engine settings come
from config/scripture.yml. A missing YAML file falls back to defaults.
"""

import os
from functools import lru_cache
from typing import Any, Dict

import yaml
from dotenv import load_dotenv

# Load .env
load_dotenv()

API_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

# ---- ENV VALUES ----
SCRIPTURE_DATA_DIR = os.getenv(
    "SCRIPTURE_DATA_DIR", os.path.join(API_ROOT, "data", "bibles")
)
SCRIPTURE_CONFIG = os.getenv(
    "SCRIPTURE_CONFIG", os.path.join(API_ROOT, "config", "scripture.yml")
)
DEFAULT_TRANSLATION = os.getenv("DEFAULT_TRANSLATION")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
SECRET_KEY = os.getenv("SECRET_KEY", "change-me")
API_HOST = os.getenv("API_HOST", "127.0.0.1")
API_PORT = int(os.getenv("API_PORT", "5055"))

DEFAULTS: Dict[str, Any] = {
    "default_translation": "tg",
    "translations": {
        "tg": {"label": "Bagong Sanlibutang Salin (Tagalog)", "package": "nwt_TG.epub"},
        "en": {"label": "New World Translation (English)", "package": "nwt_EN.epub"},
    },
    "package": {
        "chapter_nav_pattern": r"biblechapternav(\d+)\.xhtml",
        "min_chapter_chars": 50,
    },
    "search": {
        "min_query_length": 2,
        "snippet_context": 60,
        "max_per_chapter": 5,
        "max_results": 100,
        "progress_interval": 20,
    },
}


@lru_cache(maxsize=1)
def load_scripture_config() -> Dict[str, Any]:
    """Load engine settings from YAML, layered over the defaults."""
    config = {key: (dict(value) if isinstance(value, dict) else value)
              for key, value in DEFAULTS.items()}

    if os.path.exists(SCRIPTURE_CONFIG):
        with open(SCRIPTURE_CONFIG, "r", encoding="utf-8") as f:
            loaded = yaml.safe_load(f) or {}
        for key, value in loaded.items():
            if isinstance(value, dict) and isinstance(config.get(key), dict):
                config[key].update(value)
            else:
                config[key] = value

    if DEFAULT_TRANSLATION:
        config["default_translation"] = DEFAULT_TRANSLATION
    return config


def reload_scripture_config() -> Dict[str, Any]:
    """Clear cache and reload settings."""
    load_scripture_config.cache_clear()
    return load_scripture_config()


def get_search_settings() -> Dict[str, Any]:
    return load_scripture_config()["search"]


def get_package_settings() -> Dict[str, Any]:
    return load_scripture_config()["package"]


def get_translations() -> Dict[str, Dict[str, Any]]:
    return load_scripture_config()["translations"]


def get_default_translation() -> str:
    return load_scripture_config()["default_translation"]


def package_path_for(lang: str) -> str:
    """
    Filesystem path of the package file for a translation.

    Unknown language codes resolve to the default translation.
    """
    translations = get_translations()
    entry = translations.get(lang) or translations[get_default_translation()]
    return os.path.join(SCRIPTURE_DATA_DIR, entry["package"])
