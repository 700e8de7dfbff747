# core/config.py
"""
Runtime settings read from the environment (.env is loaded by the entry
points with python-dotenv) plus the immutable catalog/property defaults.
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional

from rich.logging import RichHandler

from core.models import AddOnCatalog, PropertyConfig

DEFAULT_CATALOG = AddOnCatalog()
DEFAULT_PROPERTY = PropertyConfig()


@dataclass(frozen=True)
class SmtpSettings:
    host: Optional[str]
    port: int
    user: Optional[str]
    password: Optional[str]
    sender: Optional[str]

    @property
    def configured(self) -> bool:
        return all([self.host, self.port, self.user, self.password])


def mapbox_token() -> Optional[str]:
    return os.getenv("MAPBOX_ACCESS_TOKEN") or None


def routing_timeout() -> float:
    return float(os.getenv("ROUTING_TIMEOUT", "10"))


def session_idle_ttl() -> float:
    """Seconds an API session may sit unused before it is closed."""
    return float(os.getenv("SESSION_IDLE_TTL", "1800"))


def max_sessions() -> int:
    return int(os.getenv("MAX_SESSIONS", "500"))


def smtp_settings() -> SmtpSettings:
    user = os.getenv("SMTP_USER")
    return SmtpSettings(
        host=os.getenv("SMTP_HOST"),
        port=int(os.getenv("SMTP_PORT", "587")),
        user=user,
        password=os.getenv("SMTP_PASS"),
        sender=os.getenv("EMAIL_FROM", user),
    )


def setup_logging(level: Optional[str] = None) -> None:
    """Route stdlib logging through rich; used by app.py, main.py and run.py."""
    logging.basicConfig(
        level=(level or os.getenv("LOG_LEVEL", "INFO")).upper(),
        format="%(message)s",
        datefmt="%H:%M:%S",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )
