"""
Process configuration, read from the environment once at start-up.
"""
import os
from dataclasses import dataclass

from dotenv import load_dotenv

from utils.errors import ConfigError

BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
DEFAULT_TEMPLATE_PATH = os.path.join(BASE_DIR, "assets", "template-white-elegant.png")
DEFAULT_PORT = 3002

LOG_LEVELS = ("debug", "info", "warning", "error")
_TRUTHY = ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Config:
    port: int = DEFAULT_PORT
    host: str = "0.0.0.0"
    auth_secret: str | None = None
    template_path: str = DEFAULT_TEMPLATE_PATH
    cache_template: bool = False
    log_level: str = "debug"

    @classmethod
    def from_env(cls, environ=None):
        """
        Build a Config from ``environ`` (defaults to ``os.environ``).

        Raises ConfigError for a port that is not an integer in 1-65535 or
        an unknown log level.
        """
        env = os.environ if environ is None else environ

        raw_port = env.get("PORT") or str(DEFAULT_PORT)
        try:
            port = int(raw_port)
        except ValueError:
            raise ConfigError(f"PORT must be an integer, got {raw_port!r}")
        if not 0 < port < 65536:
            raise ConfigError(f"PORT out of range: {port}")

        log_level = (env.get("LOG_LEVEL") or "debug").strip().lower()
        if log_level == "warn":
            log_level = "warning"
        if log_level not in LOG_LEVELS:
            raise ConfigError(f"LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}, got {log_level!r}")

        return cls(
            port=port,
            host=env.get("HOST") or "0.0.0.0",
            auth_secret=env.get("AUTH_SECRET") or None,
            template_path=env.get("TEMPLATE_PATH") or DEFAULT_TEMPLATE_PATH,
            cache_template=(env.get("CACHE_TEMPLATE") or "").strip().lower() in _TRUTHY,
            log_level=log_level,
        )

    def describe(self):
        """Log-safe summary; never includes the secret itself."""
        return {
            "port": self.port,
            "host": self.host,
            "templatePath": self.template_path,
            "cacheTemplate": self.cache_template,
            "logLevel": self.log_level,
            "authConfigured": self.auth_secret is not None,
        }


def load_config(dotenv_path=None):
    """
    Read a ``.env`` file into the environment, then build the Config.

    Variables already set in the environment win over the file.
    """
    load_dotenv(dotenv_path, override=False)
    return Config.from_env()
