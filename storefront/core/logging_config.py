import logging
from typing import Optional

from storefront.core.config import settings


def setup_logging(level: Optional[str] = None, fmt: Optional[str] = None) -> logging.Logger:
    """Configure root logging once for the storefront client"""
    logging.basicConfig(
        level=(level or settings.LOG_LEVEL).upper(),
        format=fmt or settings.LOG_FORMAT,
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
    return logging.getLogger("storefront")


def mask_token(token: Optional[str]) -> str:
    if not token:
        return "<none>"
    return token[:10] + "..."
