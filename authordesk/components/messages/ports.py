"""
Messages component port definitions.
"""

from authordesk.ports.clock import TimePort
from authordesk.ports.repo import MessageRepoPort
from authordesk.ports.storage import ObjectStorePort

__all__ = ["MessageRepoPort", "ObjectStorePort", "TimePort"]
