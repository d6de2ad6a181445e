"""Lichess provider package."""

from lichessdash.providers.lichess.client import LichessClient

__all__ = ["LichessClient"]
