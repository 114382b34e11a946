"""
Books component port definitions.
"""

from authordesk.ports.clock import TimePort
from authordesk.ports.repo import BookRepoPort
from authordesk.ports.storage import ObjectStorePort

__all__ = ["BookRepoPort", "ObjectStorePort", "TimePort"]
