"""Core module for the URL shortener service."""

from shrink.core.config import settings

__all__ = ["settings"]
