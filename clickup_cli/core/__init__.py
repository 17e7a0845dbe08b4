"""
Core layer - Raw types and HTTP client.

This layer provides:
- Typed dataclasses for ClickUp resources
- Low-level HTTP client with auth, multipart uploads and error normalization
"""

from clickup_cli.core.client import (
    APIClient,
    APIError,
    ClientConfig,
    CLIError,
    DecodeError,
    OperationError,
    Request,
    Response,
    TransportError,
    ValidationError,
    classify_error,
    unwrap,
)
from clickup_cli.core.types import (
    Attachment,
    ChatChannel,
    ChatMessage,
    Comment,
    CursorPage,
    CustomRole,
    Doc,
    DocPage,
    Folder,
    Goal,
    OAuthToken,
    Ref,
    Space,
    Tag,
    Task,
    TaskList,
    TimeEntry,
    TimeEntryChange,
    User,
    UserGroup,
    Webhook,
    Workspace,
)

__all__ = [
    "APIClient",
    "APIError",
    "Attachment",
    "CLIError",
    "ChatChannel",
    "ChatMessage",
    "ClientConfig",
    "Comment",
    "CursorPage",
    "CustomRole",
    "DecodeError",
    "Doc",
    "DocPage",
    "Folder",
    "Goal",
    "OAuthToken",
    "OperationError",
    "Ref",
    "Request",
    "Response",
    "Space",
    "Tag",
    "Task",
    "TaskList",
    "TimeEntry",
    "TimeEntryChange",
    "TransportError",
    "User",
    "UserGroup",
    "ValidationError",
    "Webhook",
    "Workspace",
    "classify_error",
    "unwrap",
]
