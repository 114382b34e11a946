"""
Engagements component port definitions.
"""

from authordesk.ports.clock import TimePort
from authordesk.ports.repo import EngagementRepoPort
from authordesk.ports.storage import ObjectStorePort

__all__ = ["EngagementRepoPort", "ObjectStorePort", "TimePort"]
