"""Website thumbnail plugin: headless-browser page capture."""

from .algo.browser_capture import capture_website, capture_website_thumbnail

__all__ = ["capture_website", "capture_website_thumbnail"]
