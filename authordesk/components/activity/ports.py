"""
Activity component port definitions.
"""

from authordesk.ports.clock import TimePort
from authordesk.ports.repo import LogRepoPort

__all__ = ["LogRepoPort", "TimePort"]
