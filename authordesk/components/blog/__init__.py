"""
Blog component - posts, tags and the draft/published lifecycle.
"""

from .component import (
    generate_unique_slug,
    resolve_tags,
    run_create,
    run_create_tag,
    run_delete,
    run_delete_tag,
    run_get,
    run_list,
    run_list_tags,
    run_stats,
    run_toggle_published,
    run_update,
    run_update_tag,
)
from .models import (
    BlogConfig,
    BlogStatsOutput,
    BlogValidationError,
    CreatePostInput,
    CreateTagInput,
    DeletePostInput,
    DeleteTagInput,
    GetPostInput,
    ListPostsInput,
    PostListOutput,
    PostOutput,
    TagListOutput,
    TagOutput,
    TogglePublishedInput,
    UpdatePostInput,
    UpdateTagInput,
)
from .ports import BlogMediaRepoPort, BlogPostRepoPort, BlogTagRepoPort, TimePort

__all__ = [
    # Entry points
    "run_create",
    "run_create_tag",
    "run_delete",
    "run_delete_tag",
    "run_get",
    "run_list",
    "run_list_tags",
    "run_stats",
    "run_toggle_published",
    "run_update",
    "run_update_tag",
    # Helpers
    "generate_unique_slug",
    "resolve_tags",
    # Input models
    "CreatePostInput",
    "CreateTagInput",
    "DeletePostInput",
    "DeleteTagInput",
    "GetPostInput",
    "ListPostsInput",
    "TogglePublishedInput",
    "UpdatePostInput",
    "UpdateTagInput",
    # Output models
    "BlogStatsOutput",
    "BlogValidationError",
    "PostListOutput",
    "PostOutput",
    "TagListOutput",
    "TagOutput",
    # Config
    "BlogConfig",
    # Ports
    "BlogMediaRepoPort",
    "BlogPostRepoPort",
    "BlogTagRepoPort",
    "TimePort",
]
