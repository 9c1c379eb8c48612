"""Media detection and retrieval."""

from tgscribe.media.locator import classify, decode_update, locate

__all__ = ["classify", "decode_update", "locate"]
