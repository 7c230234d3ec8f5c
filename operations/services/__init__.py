from .group_summary import (
    GroupSummary,
    WorkerRef,
    build_group_summaries,
    get_group_summary,
)

__all__ = [
    "GroupSummary",
    "WorkerRef",
    "build_group_summaries",
    "get_group_summary",
]
