"""authordesk: admin console for an author's books, blog, engagements and inbox."""

__version__ = "0.1.0"
