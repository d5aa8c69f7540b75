"""Plain omnibox submissions and slash commands (/open, /sum, /save)"""

import re
from typing import Optional

import structlog

from .exceptions import InputValidationError, OmniboxError
from .models import OmniboxResponse
from .search_engines import encode_component
from .store import QueryStore

logger = structlog.get_logger(__name__)

SCHEME_PATTERN = re.compile(r"^https?://", re.IGNORECASE)
DOMAIN_PATTERN = re.compile(r"^[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}(/|$)")
WHITESPACE_PATTERN = re.compile(r"\s")


def is_url_like(text: str) -> bool:
    """Scheme-prefixed URL or a whitespace-free domain"""
    text = text.strip()
    if not text or WHITESPACE_PATTERN.search(text):
        return False
    if SCHEME_PATTERN.match(text):
        return True
    return bool(DOMAIN_PATTERN.match(text))


def normalize_url(text: str) -> str:
    return text if SCHEME_PATTERN.match(text) else f"https://{text}"


def ask_target(text: str) -> str:
    return f"/ask?q={encode_component(text)}"


def resolve_target(raw: str) -> str:
    """Where a plain submission should navigate"""
    if is_url_like(raw):
        return normalize_url(raw)
    return ask_target(raw)


async def handle_omnibox_input(raw: Optional[str], store: Optional[QueryStore] = None) -> OmniboxResponse:
    """Route one submission"""
    raw = (raw or "").strip()
    if not raw:
        raise InputValidationError("input is required")
    
    if raw.startswith("/"):
        parts = WHITESPACE_PATTERN.split(raw[1:], maxsplit=1)
        cmd = parts[0]
        arg = parts[1].strip() if len(parts) > 1 else ""
        
        if cmd == "open":
            target = normalize_url(arg) if is_url_like(arg) else f"/ai?url={encode_component(arg)}"
            return OmniboxResponse(action="navigate", target=target)
        
        if cmd == "sum":
            return OmniboxResponse(action="navigate", target=f"/ai?url={encode_component(arg)}")
        
        if cmd == "save":
            if not is_url_like(arg):
                raise InputValidationError("not a valid url")
            if store is None:
                raise OmniboxError("Saved links are unavailable")
            url = normalize_url(arg)
            try:
                await store.save_link(url)
            except Exception as e:
                logger.error("Failed to save link", url=url, error=str(e))
                raise OmniboxError(str(e)) from e
            return OmniboxResponse(action="saved", url=url)
    
    return OmniboxResponse(action="navigate", target=resolve_target(raw))
