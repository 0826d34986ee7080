import json
import logging
from pathlib import Path
from types import MappingProxyType
from typing import Mapping

logger = logging.getLogger(__name__)

SUPPORTED_LANGUAGES = ("en", "cs", "hr", "hu")
DEFAULT_LANGUAGE = "en"
LOCALES_DIR = Path(__file__).resolve().parent.parent / "locales"


def load_locales(directory: Path = LOCALES_DIR) -> Mapping[str, Mapping[str, str]]:
    """Read every supported language file once and freeze the result."""
    languages = {}
    for code in SUPPORTED_LANGUAGES:
        with open(directory / f"{code}.json", "r", encoding="utf-8") as f:
            languages[code] = MappingProxyType(json.load(f))
    logger.info("Loaded %d locales from %s", len(languages), directory)
    return MappingProxyType(languages)


def resolve_language(code: str | None) -> str:
    return code if code in SUPPORTED_LANGUAGES else DEFAULT_LANGUAGE
