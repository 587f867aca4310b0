# display.py
# Small formatting helpers shared by the screens
import time
from typing import Optional

EARNERS_PLACEHOLDER = "—"
DETAIL_EARNERS_PLACEHOLDER = "N/A"

def top_bar_initials(display_name: Optional[str]) -> str:
    """First two characters of the stored name, 'U' when unknown"""
    return (display_name or "U")[:2].upper()

def initials_from_names(first_name: str, last_name: str) -> str:
    return (first_name[:1] + last_name[:1]).upper()

def image_url(base_url: str, image_ref: Optional[str], now_ms: Optional[int] = None) -> Optional[str]:
    """Absolute URL for a server-relative image path, with a cache-buster"""
    if not image_ref:
        return None
    if image_ref.startswith(("http://", "https://", "data:")):
        return image_ref
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return f"{base_url.rstrip('/')}{image_ref}?t={now_ms}"
