"""
Blog media component port definitions.
"""

from typing import Protocol

from authordesk.ports.clock import TimePort
from authordesk.ports.repo import BlogMediaRepoPort
from authordesk.ports.storage import ObjectStorePort


class TokenPort(Protocol):
    """Source of short random tokens for object names."""

    def token(self) -> str:
        ...


__all__ = ["BlogMediaRepoPort", "ObjectStorePort", "TimePort", "TokenPort"]
