import json
import os
import sys
from typing import Any, Dict, List, Optional

from colored_logger import get_colored_logger

logger = get_colored_logger(__name__)

DEFAULT_SETTINGS_FILE = "settings.json"


def _load_env_file(env_path: str) -> None:
    """
    Simple .env file parser that doesn't require external dependencies.
    Loads key=value pairs from .env file into os.environ.
    """
    if not os.path.isfile(env_path):
        return

    try:
        with open(env_path, "r", encoding="utf-8") as f:
            for line in f:
                line = line.strip()

                # Skip empty lines and comments
                if not line or line.startswith("#") or "=" not in line:
                    continue

                key, value = line.split("=", 1)
                key = key.strip()
                value = value.strip()

                if (value.startswith('"') and value.endswith('"')) or (
                    value.startswith("'") and value.endswith("'")
                ):
                    value = value[1:-1]

                # Variables already set in the environment win over the file
                if key and key not in os.environ:
                    os.environ[key] = value

        logger.debug(".env file loaded from %s", env_path)

    except (IOError, OSError, UnicodeDecodeError) as e:
        logger.warning("Failed to load .env file: %s", e)


class Settings:
    """
    Blog search configuration loaded from a JSON file (by default `settings.json`),
    with environment overrides for deployment-specific values.
    """

    def __init__(self, settings_file: Optional[str] = None, env_file: str = ".env") -> None:
        """
        :param settings_file: Path to the settings file. When given and missing,
            the program exits. When omitted, `settings.json` is used if present
            and built-in defaults otherwise.
        :param env_file: Optional .env file loaded into the environment first.
        """
        _load_env_file(env_file)

        if settings_file is not None:
            if not os.path.isfile(settings_file):
                logger.critical("Settings file not found at '%s'. Exiting...", settings_file)
                sys.exit(1)
            self.raw = self._load_json(settings_file)
            if not isinstance(self.raw, dict):
                logger.critical("'%s' appears to be empty or invalid. Exiting...", settings_file)
                sys.exit(1)
            self.source = settings_file
        elif os.path.isfile(DEFAULT_SETTINGS_FILE):
            self.raw = self._load_json(DEFAULT_SETTINGS_FILE) or {}
            self.source = DEFAULT_SETTINGS_FILE
        else:
            self.raw = {}
            self.source = None

        # Content
        self.content_root: str = os.environ.get(
            "BLOG_CONTENT_ROOT", self.raw.get("content_root", "content/posts")
        )
        self.content_extension: str = self.raw.get("content_extension", ".mdx")
        self.manifest: List[str] = [
            str(address) for address in self.raw.get("manifest", []) or []
        ]
        self.manifest_file: Optional[str] = self.raw.get("manifest_file") or None
        self.fetch_timeout_seconds: float = self._number(
            self.raw.get("fetch_timeout_seconds", 10), 10
        )

        # Cache
        cache_settings: Dict[str, Any] = self.raw.get("cache", {}) or {}
        self.cache_ttl_seconds: float = self._number(
            cache_settings.get("ttl_seconds", 300), 300
        )
        self.cache_key: str = cache_settings.get("key", "default")

        # Optional stats service
        stats_settings: Dict[str, Any] = self.raw.get("stats", {}) or {}
        self.stats_enabled: bool = bool(stats_settings.get("enabled", False))
        self.stats_base_url: str = os.environ.get(
            "BLOG_STATS_URL", stats_settings.get("base_url", "")
        )
        self.stats_api_key: str = os.environ.get(
            "BLOG_STATS_API_KEY", stats_settings.get("api_key", "")
        )

        if self.stats_enabled and not self.stats_base_url:
            logger.warning("Stats service enabled but no base URL configured; disabling it.")
            self.stats_enabled = False

        self.log_level: str = str(self.raw.get("log_level", "INFO")).upper()

        if self.source:
            logger.info("Settings loaded from '%s'.", self.source)
        else:
            logger.debug("No settings file found; using defaults.")

    @staticmethod
    def _number(value: Any, default: float) -> float:
        if isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0:
            logger.warning("Invalid numeric setting %r, using %s", value, default)
            return default
        return value

    def _load_json(self, path: str) -> Any:
        """
        Loads JSON from the given file path.

        :param path: The path to the JSON file.
        :return: The parsed JSON if valid, otherwise None.
        """
        try:
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)
        except (json.JSONDecodeError, IOError, OSError) as e:
            logger.error("Error loading JSON file '%s': %s", path, e)
            return None
