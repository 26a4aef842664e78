"""Image storage for deposited payloads."""

from .operations import ImageStorage, URL_PREFIX

__all__ = ["ImageStorage", "URL_PREFIX"]
