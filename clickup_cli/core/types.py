"""
Core types for ClickUp API resources.

These dataclasses provide type safety and IDE support for API responses.
Only the fields the CLI renders are modeled; JSON mode prints them as-is.
"""

from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

T = TypeVar("T")


def _str_id(value: Any) -> str:
    """ClickUp returns some IDs as numbers and others as strings."""
    if value is None:
        return ""
    return str(value)


# =============================================================================
# Pagination
# =============================================================================


@dataclass
class CursorPage(Generic[T]):
    """One page of a cursor-paginated v3 response."""

    data: list[T]
    next_cursor: str | None = None

    @property
    def has_more(self) -> bool:
        """Check if the server returned a cursor for another page."""
        return bool(self.next_cursor)


# =============================================================================
# Users & Workspaces
# =============================================================================


@dataclass
class User:
    """A ClickUp user."""

    id: int
    username: str = ""
    email: str | None = None
    color: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "User":
        """Create from API response dict."""
        # Some endpoints wrap the user: {"user": {...}}
        if "user" in data and isinstance(data["user"], dict):
            data = data["user"]
        return cls(
            id=int(data.get("id") or 0),
            username=data.get("username") or "",
            email=data.get("email"),
            color=data.get("color"),
        )


@dataclass
class Workspace:
    """A workspace (called "team" in the v2 API)."""

    id: str
    name: str
    color: str | None = None
    members: list[User] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Workspace":
        """Create from API response dict."""
        return cls(
            id=_str_id(data["id"]),
            name=data.get("name") or "",
            color=data.get("color"),
            members=[User.from_dict(m) for m in data.get("members") or []],
        )


@dataclass
class UserGroup:
    """A named group of workspace users."""

    id: str
    name: str = ""
    members: list[User] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "UserGroup":
        """Create from API response dict."""
        return cls(
            id=_str_id(data["id"]),
            name=data.get("name") or "",
            members=[User.from_dict(m) for m in data.get("members") or []],
        )


@dataclass
class CustomRole:
    """A workspace custom role."""

    id: int
    name: str = ""
    permissions: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CustomRole":
        return cls(
            id=int(data.get("id") or 0),
            name=data.get("name") or "",
            permissions=list(data.get("permissions") or []),
        )


@dataclass
class OAuthToken:
    """Result of exchanging an OAuth authorization code."""

    access_token: str
    token_type: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "OAuthToken":
        """Create from API response dict."""
        return cls(access_token=data["access_token"], token_type=data.get("token_type") or "")


# =============================================================================
# Hierarchy: spaces, folders, lists
# =============================================================================


@dataclass
class Ref:
    """A lightweight reference to a parent object."""

    id: str
    name: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "Ref | None":
        if not data:
            return None
        return cls(id=_str_id(data.get("id")), name=data.get("name") or "")


@dataclass
class Space:
    """A space inside a workspace."""

    id: str
    name: str
    private: bool = False
    archived: bool = False
    statuses: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Space":
        """Create from API response dict."""
        return cls(
            id=_str_id(data["id"]),
            name=data.get("name") or "",
            private=bool(data.get("private")),
            archived=bool(data.get("archived")),
            statuses=[s.get("status", "") for s in data.get("statuses") or []],
        )


@dataclass
class TaskList:
    """A list of tasks."""

    id: str
    name: str
    content: str | None = None
    task_count: int | None = None
    folder: Ref | None = None
    space: Ref | None = None
    archived: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TaskList":
        """Create from API response dict."""
        task_count = data.get("task_count")
        return cls(
            id=_str_id(data["id"]),
            name=data.get("name") or "",
            content=data.get("content"),
            task_count=int(task_count) if task_count is not None else None,
            folder=Ref.from_dict(data.get("folder")),
            space=Ref.from_dict(data.get("space")),
            archived=bool(data.get("archived")),
        )


@dataclass
class Folder:
    """A folder grouping lists inside a space."""

    id: str
    name: str
    hidden: bool = False
    space: Ref | None = None
    lists: list[TaskList] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Folder":
        """Create from API response dict."""
        return cls(
            id=_str_id(data["id"]),
            name=data.get("name") or "",
            hidden=bool(data.get("hidden")),
            space=Ref.from_dict(data.get("space")),
            lists=[TaskList.from_dict(lst) for lst in data.get("lists") or []],
        )


# =============================================================================
# Tasks
# =============================================================================


@dataclass
class Tag:
    """A space tag."""

    name: str
    tag_fg: str | None = None
    tag_bg: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Tag":
        """Create from API response dict."""
        return cls(name=data["name"], tag_fg=data.get("tag_fg"), tag_bg=data.get("tag_bg"))


@dataclass
class Task:
    """A ClickUp task."""

    id: str
    name: str
    description: str | None = None
    status: str = ""
    priority: str | None = None
    due_date: str | None = None
    url: str | None = None
    home_list: Ref | None = None
    folder: Ref | None = None
    space: Ref | None = None
    assignees: list[User] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Task":
        """Create from API response dict."""
        status = data.get("status") or {}
        priority = data.get("priority") or {}
        return cls(
            id=_str_id(data["id"]),
            name=data.get("name") or "",
            description=data.get("description") or None,
            status=status.get("status", "") if isinstance(status, dict) else str(status),
            priority=priority.get("priority") if isinstance(priority, dict) else None,
            due_date=data.get("due_date"),
            url=data.get("url"),
            home_list=Ref.from_dict(data.get("list")),
            folder=Ref.from_dict(data.get("folder")),
            space=Ref.from_dict(data.get("space")),
            assignees=[User.from_dict(u) for u in data.get("assignees") or []],
            tags=[t.get("name", "") for t in data.get("tags") or []],
        )


@dataclass
class Comment:
    """A comment on a task, list, or view."""

    id: str
    text: str
    user: User | None = None
    date: str | None = None
    reply_count: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Comment":
        """Create from API response dict."""
        user = data.get("user")
        return cls(
            id=_str_id(data["id"]),
            text=data.get("comment_text") or "",
            user=User.from_dict(user) if user else None,
            date=_str_id(data.get("date")) or None,
            reply_count=int(data.get("reply_count") or 0),
        )


# =============================================================================
# Time tracking
# =============================================================================


@dataclass
class TimeEntry:
    """A tracked time interval."""

    id: str
    task: Ref | None = None
    user: User | None = None
    duration: int = 0
    start: str | None = None
    end: str | None = None
    description: str = ""
    billable: bool = False

    @property
    def is_running(self) -> bool:
        """Running timers report a negative duration."""
        return self.duration < 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TimeEntry":
        """Create from API response dict."""
        # Single-entry endpoints wrap the entry in {"data": {...}}
        if isinstance(data.get("data"), dict):
            data = data["data"]
        task = data.get("task")
        user = data.get("user")
        return cls(
            id=_str_id(data["id"]),
            task=Ref.from_dict(task) if isinstance(task, dict) else None,
            user=User.from_dict(user) if user else None,
            duration=int(data.get("duration") or 0),
            start=_str_id(data.get("start")) or None,
            end=_str_id(data.get("end")) or None,
            description=data.get("description") or "",
            billable=bool(data.get("billable")),
        )


@dataclass
class TimeEntryChange:
    """One field change in a time entry's history."""

    id: str
    field: str = ""
    before: str = ""
    after: str = ""
    date: str | None = None
    user: User | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TimeEntryChange":
        user = data.get("user")
        return cls(
            id=_str_id(data.get("id")),
            field=data.get("field") or "",
            before=_str_id(data.get("before")),
            after=_str_id(data.get("after")),
            date=_str_id(data.get("date")) or None,
            user=User.from_dict(user) if user else None,
        )


# =============================================================================
# Attachments, webhooks, goals
# =============================================================================


@dataclass
class Attachment:
    """An uploaded file."""

    id: str
    title: str = ""
    url: str = ""
    size: int = 0
    extension: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Attachment":
        """Create from API response dict."""
        return cls(
            id=_str_id(data["id"]),
            title=data.get("title") or data.get("name") or "",
            url=data.get("url") or "",
            size=int(data.get("size") or 0),
            extension=data.get("extension"),
        )


@dataclass
class Webhook:
    """A webhook subscription."""

    id: str
    endpoint: str
    events: list[str] = field(default_factory=list)
    status: str | None = None
    secret: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Webhook":
        """Create from API response dict."""
        # Create/update wrap the hook: {"id": ..., "webhook": {...}}
        hook = data.get("webhook") if isinstance(data.get("webhook"), dict) else data
        health = hook.get("health") or {}
        return cls(
            id=_str_id(hook.get("id") or data.get("id")),
            endpoint=hook.get("endpoint") or "",
            events=list(hook.get("events") or []),
            status=health.get("status") or hook.get("status"),
            secret=hook.get("secret"),
        )


@dataclass
class Goal:
    """A goal with its key results."""

    id: str
    name: str
    description: str = ""
    due_date: str | None = None
    percent_completed: int = 0
    key_results: list[dict[str, Any]] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Goal":
        """Create from API response dict."""
        if isinstance(data.get("goal"), dict):
            data = data["goal"]
        return cls(
            id=_str_id(data["id"]),
            name=data.get("name") or "",
            description=data.get("description") or "",
            due_date=_str_id(data.get("due_date")) or None,
            percent_completed=int(data.get("percent_completed") or 0),
            key_results=list(data.get("key_results") or []),
        )


# =============================================================================
# Chat & Docs (v3)
# =============================================================================


@dataclass
class ChatChannel:
    """A chat channel or direct message."""

    id: str
    name: str = ""
    type: str = ""
    description: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ChatChannel":
        """Create from API response dict."""
        if isinstance(data.get("data"), dict):
            data = data["data"]
        return cls(
            id=_str_id(data["id"]),
            name=data.get("name") or "",
            type=data.get("type") or "",
            description=data.get("description") or "",
        )


@dataclass
class ChatMessage:
    """A chat message."""

    id: str
    content: str = ""
    user_id: str = ""
    date: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ChatMessage":
        """Create from API response dict."""
        if isinstance(data.get("data"), dict):
            data = data["data"]
        return cls(
            id=_str_id(data["id"]),
            content=data.get("content") or "",
            user_id=_str_id(data.get("user_id")),
            date=_str_id(data.get("date")) or None,
        )


@dataclass
class Doc:
    """A ClickUp Doc."""

    id: str
    name: str = ""
    date_created: str | None = None
    creator: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Doc":
        """Create from API response dict."""
        return cls(
            id=_str_id(data["id"]),
            name=data.get("name") or "",
            date_created=_str_id(data.get("date_created")) or None,
            creator=_str_id(data.get("creator")),
        )


@dataclass
class DocPage:
    """A page inside a Doc."""

    id: str
    name: str = ""
    content: str = ""
    pages: list["DocPage"] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DocPage":
        """Create from API response dict."""
        return cls(
            id=_str_id(data["id"]),
            name=data.get("name") or "",
            content=data.get("content") or "",
            pages=[DocPage.from_dict(p) for p in data.get("pages") or []],
        )


def list_of(item_type: Any, key: str | None = None) -> Any:
    """
    Build a decode target for a list response.

    ClickUp wraps most collections in an envelope, e.g. {"tasks": [...]}.
    With ``key`` set, items are read from that field; otherwise the payload
    itself must be a list.
    """

    def parse(payload: Any) -> list:
        items = payload[key] if key is not None else payload
        if not isinstance(items, list):
            raise TypeError(f"expected a list, got {type(items).__name__}")
        return [item_type.from_dict(item) for item in items]

    return parse


def cursor_page_of(item_type: Any, key: str = "data") -> Any:
    """Build a decode target for a cursor-paginated v3 response."""

    def parse(payload: dict[str, Any]) -> CursorPage:
        items = [item_type.from_dict(item) for item in payload.get(key) or []]
        return CursorPage(data=items, next_cursor=payload.get("next_cursor") or None)

    return parse
