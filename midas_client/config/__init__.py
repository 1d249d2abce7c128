"""Configuration module."""

from midas_client.config.settings import MidasSettings

__all__ = ["MidasSettings"]
