"""
Blog component port definitions.
"""

from authordesk.ports.clock import TimePort
from authordesk.ports.repo import BlogMediaRepoPort, BlogPostRepoPort, BlogTagRepoPort
from authordesk.ports.storage import ObjectStorePort

__all__ = [
    "BlogMediaRepoPort",
    "BlogPostRepoPort",
    "BlogTagRepoPort",
    "ObjectStorePort",
    "TimePort",
]
