"""
ClickUp SDK - High-level client with nice ergonomics.

This layer provides a typed interface for ClickUp resources, built on top of
the core APIClient. Every method checks its required identifiers before any
request is made and labels failures with the operation that failed.
"""

import builtins
import urllib.parse
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, BinaryIO

from clickup_cli.core.client import (
    DEFAULT_BASE_URL,
    DEFAULT_TIMEOUT,
    APIClient,
    CLIError,
    OperationError,
    ValidationError,
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
    cursor_page_of,
    list_of,
)

ID_REQUIRED = "id is required"
NAME_REQUIRED = "name is required"
WORKSPACE_REQUIRED = "workspace ID required for v3 API; set CLICKUP_WORKSPACE_ID or use --workspace flag"

ATTACHMENT_PARENT_TYPES = ("task", "list", "folder", "space")


def with_query(path: str, params: dict[str, Any] | None) -> str:
    """Append URL-encoded params to a path, skipping None/False/empty values."""
    if not params:
        return path
    filtered = {k: v for k, v in params.items() if v is not None and v is not False and v != [] and v != ""}
    if not filtered:
        return path
    query_string = urllib.parse.urlencode(
        {k: ("true" if v is True else v) for k, v in filtered.items()},
        doseq=True,
    )
    separator = "&" if "?" in path else "?"
    return f"{path}{separator}{query_string}"


def _require(*values: Any, message: str = ID_REQUIRED) -> None:
    if any(not v for v in values):
        raise ValidationError(message)


def _quote(segment: str) -> str:
    return urllib.parse.quote(segment, safe="")


@contextmanager
def _operation(label: str) -> Iterator[None]:
    """Label any client error raised inside the block with ``label``."""
    try:
        yield
    except CLIError as e:
        raise OperationError(label, e) from e


class _Operations:
    """Shared state for a group of operations."""

    def __init__(self, client: APIClient, workspace_id: str | None = None):
        self._client = client
        self._workspace_id = workspace_id

    def _v3_path(self, path: str) -> str:
        """Build a v3 path under the configured workspace."""
        if not self._workspace_id:
            raise ValidationError(WORKSPACE_REQUIRED)
        return f"/v3/workspaces/{self._workspace_id}{path}"


class ClickUpClient:
    """
    High-level ClickUp API client with typed methods.

    Example:
        client = ClickUpClient(api_key="pk_...", workspace_id="123")

        tasks = client.tasks.list("list-id")
        task = client.tasks.create("list-id", "Write release notes")
        client.attachments.upload(task.id, open("notes.pdf", "rb"), "notes.pdf")

    """

    def __init__(
        self,
        api_key: str = "",
        base_url: str = DEFAULT_BASE_URL,
        workspace_id: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        client: APIClient | None = None,
    ):
        """
        Initialize the ClickUp client.

        Args:
            api_key: ClickUp personal token or OAuth access token
            base_url: API base URL
            workspace_id: Workspace ID for v3 endpoints (chat, docs, attachments, move)
            timeout: Request timeout in seconds
            client: Prebuilt core client; overrides api_key/base_url/timeout

        """
        self._client = client or APIClient(api_key=api_key, base_url=base_url, timeout=timeout)
        self.workspace_id = workspace_id

        # Sub-clients for different resource groups
        self.auth = AuthOperations(self._client)
        self.workspaces = WorkspaceOperations(self._client)
        self.spaces = SpaceOperations(self._client)
        self.folders = FolderOperations(self._client)
        self.lists = ListOperations(self._client)
        self.tasks = TaskOperations(self._client, workspace_id)
        self.comments = CommentOperations(self._client)
        self.time = TimeOperations(self._client)
        self.attachments = AttachmentOperations(self._client, workspace_id)
        self.webhooks = WebhookOperations(self._client)
        self.goals = GoalOperations(self._client)
        self.members = MemberOperations(self._client)
        self.groups = GroupOperations(self._client)
        self.roles = RoleOperations(self._client)
        self.tags = TagOperations(self._client)
        self.chat = ChatOperations(self._client, workspace_id)
        self.docs = DocOperations(self._client, workspace_id)

    @property
    def api(self) -> APIClient:
        """The underlying transport client."""
        return self._client


# =============================================================================
# Auth & Workspaces
# =============================================================================


class AuthOperations(_Operations):
    """Authorization endpoints."""

    def whoami(self) -> User:
        """Return the user the credential belongs to."""
        with _operation("get authorized user"):
            return self._client.get("/v2/user", User)

    def token(self, client_id: str, client_secret: str, code: str) -> OAuthToken:
        """
        Exchange an OAuth authorization code for an access token.

        The token endpoint must not see any existing credential, so the request
        goes out without an Authorization header.
        """
        _require(client_id, client_secret, code, message="client_id, client_secret, and code are required")
        body = {"client_id": client_id, "client_secret": client_secret, "code": code}
        with _operation("exchange oauth token"):
            return self._client.send_unauthenticated("/v2/oauth/token", body, OAuthToken)


class WorkspaceOperations(_Operations):
    """Workspace (team) endpoints."""

    def list(self) -> list[Workspace]:
        """List workspaces the credential can access."""
        with _operation("list workspaces"):
            return self._client.get("/v2/team", list_of(Workspace, "teams"))

    def plan(self, team_id: str) -> dict[str, Any]:
        """Get the workspace plan."""
        _require(team_id)
        with _operation("get workspace plan"):
            return self._client.get(f"/v2/team/{team_id}/plan", dict)

    def seats(self, team_id: str) -> dict[str, Any]:
        """Get workspace seat usage."""
        _require(team_id)
        with _operation("get workspace seats"):
            return self._client.get(f"/v2/team/{team_id}/seats", dict)


# =============================================================================
# Hierarchy
# =============================================================================


class SpaceOperations(_Operations):
    """Space endpoints."""

    def list(self, team_id: str, archived: bool = False) -> list[Space]:
        _require(team_id)
        path = with_query(f"/v2/team/{team_id}/space", {"archived": archived})
        with _operation("list spaces"):
            return self._client.get(path, list_of(Space, "spaces"))

    def get(self, space_id: str) -> Space:
        _require(space_id)
        with _operation("get space"):
            return self._client.get(f"/v2/space/{space_id}", Space)

    def create(self, team_id: str, name: str, private: bool = False) -> Space:
        _require(team_id)
        _require(name, message=NAME_REQUIRED)
        with _operation("create space"):
            return self._client.post(f"/v2/team/{team_id}/space", {"name": name, "private": private}, Space)

    def update(self, space_id: str, **fields: Any) -> Space:
        _require(space_id)
        with _operation("update space"):
            return self._client.put(f"/v2/space/{space_id}", fields, Space)

    def delete(self, space_id: str) -> None:
        _require(space_id)
        with _operation("delete space"):
            self._client.delete(f"/v2/space/{space_id}")


class FolderOperations(_Operations):
    """Folder endpoints."""

    def list(self, space_id: str, archived: bool = False) -> list[Folder]:
        _require(space_id)
        path = with_query(f"/v2/space/{space_id}/folder", {"archived": archived})
        with _operation("list folders"):
            return self._client.get(path, list_of(Folder, "folders"))

    def get(self, folder_id: str) -> Folder:
        _require(folder_id)
        with _operation("get folder"):
            return self._client.get(f"/v2/folder/{folder_id}", Folder)

    def create(self, space_id: str, name: str) -> Folder:
        _require(space_id)
        _require(name, message=NAME_REQUIRED)
        with _operation("create folder"):
            return self._client.post(f"/v2/space/{space_id}/folder", {"name": name}, Folder)

    def update(self, folder_id: str, name: str) -> Folder:
        _require(folder_id)
        _require(name, message=NAME_REQUIRED)
        with _operation("update folder"):
            return self._client.put(f"/v2/folder/{folder_id}", {"name": name}, Folder)

    def delete(self, folder_id: str) -> None:
        _require(folder_id)
        with _operation("delete folder"):
            self._client.delete(f"/v2/folder/{folder_id}")


class ListOperations(_Operations):
    """List endpoints."""

    def list_by_folder(self, folder_id: str, archived: bool = False) -> list[TaskList]:
        """Lists inside a folder."""
        _require(folder_id)
        path = with_query(f"/v2/folder/{folder_id}/list", {"archived": archived})
        with _operation("list lists in folder"):
            return self._client.get(path, list_of(TaskList, "lists"))

    def list_folderless(self, space_id: str, archived: bool = False) -> list[TaskList]:
        """Lists that sit directly in a space."""
        _require(space_id)
        path = with_query(f"/v2/space/{space_id}/list", {"archived": archived})
        with _operation("list folderless lists"):
            return self._client.get(path, list_of(TaskList, "lists"))

    def get(self, list_id: str) -> TaskList:
        _require(list_id)
        with _operation("get list"):
            return self._client.get(f"/v2/list/{list_id}", TaskList)

    def create_in_folder(self, folder_id: str, name: str, content: str | None = None) -> TaskList:
        _require(folder_id)
        _require(name, message=NAME_REQUIRED)
        body = _compact({"name": name, "content": content})
        with _operation("create list"):
            return self._client.post(f"/v2/folder/{folder_id}/list", body, TaskList)

    def create_folderless(self, space_id: str, name: str, content: str | None = None) -> TaskList:
        _require(space_id)
        _require(name, message=NAME_REQUIRED)
        body = _compact({"name": name, "content": content})
        with _operation("create folderless list"):
            return self._client.post(f"/v2/space/{space_id}/list", body, TaskList)

    def update(self, list_id: str, **fields: Any) -> TaskList:
        _require(list_id)
        with _operation("update list"):
            return self._client.put(f"/v2/list/{list_id}", _compact(fields), TaskList)

    def delete(self, list_id: str) -> None:
        _require(list_id)
        with _operation("delete list"):
            self._client.delete(f"/v2/list/{list_id}")

    def add_task(self, list_id: str, task_id: str) -> None:
        """Add a task to an additional list."""
        _require(list_id, task_id)
        with _operation("add task to list"):
            self._client.post(f"/v2/list/{list_id}/task/{task_id}")

    def remove_task(self, list_id: str, task_id: str) -> None:
        """Remove a task from an additional list."""
        _require(list_id, task_id)
        with _operation("remove task from list"):
            self._client.delete(f"/v2/list/{list_id}/task/{task_id}")


def _compact(fields: dict[str, Any]) -> dict[str, Any]:
    """Drop unset (None) fields from a request body."""
    return {k: v for k, v in fields.items() if v is not None}


# =============================================================================
# Tasks
# =============================================================================


class TaskOperations(_Operations):
    """Task endpoints."""

    def list(
        self,
        list_id: str,
        status: str | None = None,
        assignee: str | None = None,
        page: int | None = None,
    ) -> builtins.list[Task]:
        """
        List tasks in a list, closed tasks included.

        Args:
            list_id: List to read
            status: Only tasks in this status
            assignee: Only tasks assigned to this user ID
            page: Zero-based page number

        """
        _require(list_id)
        params = {
            "include_closed": True,
            "statuses[]": status,
            "assignees[]": assignee,
            "page": page,
        }
        path = with_query(f"/v2/list/{list_id}/task", params)
        with _operation("list tasks"):
            return self._client.get(path, list_of(Task, "tasks"))

    def get(self, task_id: str) -> Task:
        _require(task_id)
        with _operation("get task"):
            return self._client.get(f"/v2/task/{task_id}", Task)

    def create(
        self,
        list_id: str,
        name: str,
        description: str | None = None,
        assignees: builtins.list[int] | None = None,
        priority: int | None = None,
        due_date: int | None = None,
        status: str | None = None,
    ) -> Task:
        """Create a task in a list. Priority runs 1 (urgent) to 4 (low)."""
        _require(list_id)
        _require(name, message=NAME_REQUIRED)
        body = _compact(
            {
                "name": name,
                "description": description,
                "assignees": assignees or None,
                "priority": priority,
                "due_date": due_date,
                "status": status,
            }
        )
        with _operation("create task"):
            return self._client.post(f"/v2/list/{list_id}/task", body, Task)

    def update(self, task_id: str, **fields: Any) -> Task:
        """Update task fields (name, description, status, priority, due_date...)."""
        _require(task_id)
        with _operation("update task"):
            return self._client.put(f"/v2/task/{task_id}", _compact(fields), Task)

    def delete(self, task_id: str) -> None:
        _require(task_id)
        with _operation("delete task"):
            self._client.delete(f"/v2/task/{task_id}")

    def search(
        self,
        team_id: str,
        statuses: builtins.list[str] | None = None,
        assignees: builtins.list[int] | None = None,
        tags: builtins.list[str] | None = None,
        include_closed: bool = False,
        subtasks: bool = False,
        order_by: str | None = None,
        reverse: bool = False,
        page: int | None = None,
        due_date_gt: int | None = None,
        due_date_lt: int | None = None,
    ) -> builtins.list[Task]:
        """Search tasks across a whole workspace."""
        _require(team_id)
        params = {
            "page": page,
            "order_by": order_by,
            "reverse": reverse,
            "subtasks": subtasks,
            "statuses[]": statuses or [],
            "include_closed": include_closed,
            "assignees[]": [str(a) for a in assignees or []],
            "tags[]": tags or [],
            "due_date_gt": due_date_gt,
            "due_date_lt": due_date_lt,
        }
        path = with_query(f"/v2/team/{team_id}/task", params)
        with _operation("search tasks"):
            return self._client.get(path, list_of(Task, "tasks"))

    def time_in_status(self, task_id: str) -> dict[str, Any]:
        """Time spent in each status for one task."""
        _require(task_id)
        with _operation("get time in status"):
            return self._client.get(f"/v2/task/{task_id}/time_in_status", dict)

    def bulk_time_in_status(self, task_ids: builtins.list[str]) -> dict[str, Any]:
        """Time in status for several tasks, keyed by task ID."""
        _require(task_ids, message="at least one task ID is required")
        path = with_query("/v2/task/bulk_time_in_status/task_ids", {"task_ids": task_ids})
        with _operation("get bulk time in status"):
            return self._client.get(path, dict)

    def create_from_template(self, list_id: str, template_id: str, name: str | None = None) -> Task:
        """Create a task in a list from a task template; ``name`` overrides the template's."""
        _require(list_id, template_id)
        body = _compact({"name": name})
        with _operation("create task from template"):
            return self._client.post(f"/v2/list/{list_id}/taskTemplate/{template_id}", body, Task)

    def merge(self, target_task_id: str, source_task_ids: builtins.list[str]) -> dict[str, Any]:
        """Merge source tasks into the target task."""
        _require(target_task_id)
        _require(source_task_ids, message="at least one source task ID is required")
        body = {"merged_task_ids": source_task_ids}
        with _operation("merge tasks"):
            return self._client.post(f"/v2/task/{target_task_id}/merge", body, dict)

    def move(self, task_id: str, list_id: str) -> dict[str, Any]:
        """Move a task to a new home list (v3)."""
        _require(task_id, list_id)
        path = self._v3_path(f"/tasks/{task_id}/home_list/{list_id}")
        with _operation("move task"):
            return self._client.put(path, None, dict)


# =============================================================================
# Comments
# =============================================================================


class CommentOperations(_Operations):
    """Comment endpoints."""

    def list(self, task_id: str) -> list[Comment]:
        _require(task_id)
        with _operation("list comments"):
            return self._client.get(f"/v2/task/{task_id}/comment", list_of(Comment, "comments"))

    def add(self, task_id: str, text: str, notify_all: bool = False) -> Comment:
        _require(task_id)
        _require(text, message="comment text is required")
        body = {"comment_text": text, "notify_all": notify_all}
        with _operation("add comment"):
            created = self._client.post(f"/v2/task/{task_id}/comment", body, dict)
        # The create endpoint only echoes the ID and date.
        return Comment(id=str(created.get("id", "")), text=text, date=_maybe_str(created.get("date")))

    def update(self, comment_id: str, text: str, resolved: bool | None = None) -> None:
        _require(comment_id)
        _require(text, message="comment text is required")
        body = _compact({"comment_text": text, "resolved": resolved})
        with _operation("update comment"):
            self._client.put(f"/v2/comment/{comment_id}", body)

    def delete(self, comment_id: str) -> None:
        _require(comment_id)
        with _operation("delete comment"):
            self._client.delete(f"/v2/comment/{comment_id}")

    def replies(self, comment_id: str) -> builtins.list[Comment]:
        """Threaded replies to a comment."""
        _require(comment_id)
        with _operation("list comment replies"):
            return self._client.get(f"/v2/comment/{comment_id}/reply", list_of(Comment, "comments"))

    def reply(self, comment_id: str, text: str) -> Comment:
        _require(comment_id)
        _require(text, message="comment text is required")
        with _operation("reply to comment"):
            created = self._client.post(f"/v2/comment/{comment_id}/reply", {"comment_text": text}, dict)
        return Comment(id=str(created.get("id", "")), text=text, date=_maybe_str(created.get("date")))


def _maybe_str(value: Any) -> str | None:
    return None if value is None else str(value)


# =============================================================================
# Time tracking
# =============================================================================


class TimeOperations(_Operations):
    """Time tracking endpoints (team-level)."""

    def list(
        self,
        team_id: str,
        task_id: str | None = None,
        start_date: int | None = None,
        end_date: int | None = None,
    ) -> builtins.list[TimeEntry]:
        """List time entries, optionally for one task or a date range (ms)."""
        _require(team_id)
        params = {"task_id": task_id, "start_date": start_date, "end_date": end_date}
        path = with_query(f"/v2/team/{team_id}/time_entries", params)
        with _operation("list time entries"):
            return self._client.get(path, list_of(TimeEntry, "data"))

    def log(
        self,
        team_id: str,
        task_id: str,
        duration_ms: int,
        start_ms: int,
        description: str | None = None,
        billable: bool = False,
    ) -> TimeEntry:
        """Record a finished time entry against a task."""
        _require(team_id, task_id)
        if duration_ms <= 0:
            raise ValidationError("duration must be positive")
        body = _compact(
            {
                "tid": task_id,
                "duration": duration_ms,
                "start": start_ms,
                "description": description,
                "billable": billable,
            }
        )
        with _operation("log time"):
            return self._client.post(f"/v2/team/{team_id}/time_entries", body, TimeEntry)

    def get(self, team_id: str, entry_id: str) -> TimeEntry:
        _require(team_id, entry_id)
        with _operation("get time entry"):
            return self._client.get(f"/v2/team/{team_id}/time_entries/{entry_id}", _first_entry)

    def current(self, team_id: str) -> TimeEntry | None:
        """The running timer, or None when nothing is running."""
        _require(team_id)
        with _operation("get current time entry"):
            return self._client.get(f"/v2/team/{team_id}/time_entries/current", _optional_entry)

    def start(self, team_id: str, task_id: str | None = None, description: str | None = None) -> TimeEntry:
        _require(team_id)
        body = _compact({"tid": task_id, "description": description})
        with _operation("start timer"):
            return self._client.post(f"/v2/team/{team_id}/time_entries/start", body, TimeEntry)

    def stop(self, team_id: str) -> TimeEntry:
        _require(team_id)
        with _operation("stop timer"):
            return self._client.post(f"/v2/team/{team_id}/time_entries/stop", None, TimeEntry)

    def delete(self, team_id: str, entry_id: str) -> None:
        _require(team_id, entry_id)
        with _operation("delete time entry"):
            self._client.delete(f"/v2/team/{team_id}/time_entries/{entry_id}")

    def update(
        self,
        team_id: str,
        entry_id: str,
        description: str | None = None,
        duration_ms: int | None = None,
        start_ms: int | None = None,
        end_ms: int | None = None,
        billable: bool | None = None,
        tags: builtins.list[str] | None = None,
        tag_action: str | None = None,
    ) -> TimeEntry:
        """
        Update a time entry.

        Args:
            team_id: Team (workspace) the entry belongs to
            entry_id: Entry to change
            tags: Tag names, applied according to ``tag_action``
            tag_action: "add" or "remove"

        """
        _require(team_id, entry_id)
        if tag_action is not None and tag_action not in ("add", "remove"):
            raise ValidationError("tag action must be add or remove")
        body = _compact(
            {
                "description": description,
                "duration": duration_ms,
                "start": start_ms,
                "end": end_ms,
                "billable": billable,
                "tags": _tag_refs(tags) if tags else None,
                "tag_action": tag_action,
            }
        )
        with _operation("update time entry"):
            return self._client.put(f"/v2/team/{team_id}/time_entries/{entry_id}", body, _first_entry)

    def history(self, team_id: str, entry_id: str) -> builtins.list[TimeEntryChange]:
        _require(team_id, entry_id)
        path = f"/v2/team/{team_id}/time_entries/{entry_id}/history"
        with _operation("get time entry history"):
            return self._client.get(path, list_of(TimeEntryChange, "data"))

    def tags(self, team_id: str) -> builtins.list[Tag]:
        """Tags used by any time entry in the team."""
        _require(team_id)
        with _operation("list time entry tags"):
            return self._client.get(f"/v2/team/{team_id}/time_entries/tags", list_of(Tag, "data"))

    def add_tags(self, team_id: str, entry_ids: builtins.list[str], tags: builtins.list[str]) -> None:
        _require(team_id)
        _require(entry_ids, tags, message="time entry IDs and tags are required")
        body = {"time_entry_ids": entry_ids, "tags": _tag_refs(tags)}
        with _operation("add time entry tags"):
            self._client.post(f"/v2/team/{team_id}/time_entries/tags", body)

    def remove_tags(self, team_id: str, entry_ids: builtins.list[str], tags: builtins.list[str]) -> None:
        _require(team_id)
        _require(entry_ids, tags, message="time entry IDs and tags are required")
        body = {"time_entry_ids": entry_ids, "tags": _tag_refs(tags)}
        with _operation("remove time entry tags"):
            self._client.decode_with_body("DELETE", f"/v2/team/{team_id}/time_entries/tags", body)

    def rename_tag(self, team_id: str, old_name: str, new_name: str) -> None:
        """Rename a tag on every time entry in the team."""
        _require(team_id)
        _require(old_name, new_name, message=NAME_REQUIRED)
        body = {"name": old_name, "new_name": new_name}
        with _operation("rename time entry tag"):
            self._client.put(f"/v2/team/{team_id}/time_entries/tags", body)


def _tag_refs(names: list[str]) -> list[dict[str, str]]:
    return [{"name": name} for name in names]


def _first_entry(payload: dict[str, Any]) -> TimeEntry:
    # GET by ID returns {"data": [entry]}
    data = payload.get("data")
    if isinstance(data, list):
        if not data:
            raise ValueError("time entry not found in response")
        return TimeEntry.from_dict(data[0])
    return TimeEntry.from_dict(payload)


def _optional_entry(payload: dict[str, Any]) -> TimeEntry | None:
    if not payload.get("data"):
        return None
    return TimeEntry.from_dict(payload)


# =============================================================================
# Attachments
# =============================================================================


class AttachmentOperations(_Operations):
    """File attachments."""

    def upload(self, task_id: str, stream: BinaryIO, file_name: str) -> Attachment:
        """
        Upload a file to a task (v2).

        Args:
            task_id: Task to attach to
            stream: Open binary stream with the file contents
            file_name: Name shown in ClickUp; directories are stripped

        """
        _require(task_id)
        _require(file_name, message="file name is required")
        with _operation("upload attachment"):
            return self._client.send_multipart(
                f"/v2/task/{task_id}/attachment", "attachment", stream, file_name, Attachment
            )

    def list(self, parent_type: str, parent_id: str) -> list[Attachment]:
        """List attachments on a task, list, folder, or space (v3)."""
        _check_parent(parent_type)
        _require(parent_id)
        path = self._v3_path(f"/{parent_type}/{parent_id}/attachments")
        with _operation("list attachments"):
            return self._client.get(path, list_of(Attachment, "attachments"))

    def create(self, parent_type: str, parent_id: str, stream: BinaryIO, file_name: str) -> Attachment:
        """Upload a file to a task, list, folder, or space (v3)."""
        _check_parent(parent_type)
        _require(parent_id)
        _require(file_name, message="file name is required")
        path = self._v3_path(f"/{parent_type}/{parent_id}/attachments")
        with _operation("create attachment"):
            return self._client.send_multipart(path, "attachment", stream, file_name, Attachment)


def _check_parent(parent_type: str) -> None:
    if parent_type not in ATTACHMENT_PARENT_TYPES:
        raise ValidationError(
            f"invalid parent type {parent_type!r} (expected one of: {', '.join(ATTACHMENT_PARENT_TYPES)})"
        )


# =============================================================================
# Webhooks & Goals
# =============================================================================


class WebhookOperations(_Operations):
    """Webhook endpoints."""

    def list(self, team_id: str) -> list[Webhook]:
        _require(team_id)
        with _operation("list webhooks"):
            return self._client.get(f"/v2/team/{team_id}/webhook", list_of(Webhook, "webhooks"))

    def create(
        self,
        team_id: str,
        endpoint: str,
        events: builtins.list[str],
        space_id: str | None = None,
        list_id: str | None = None,
        task_id: str | None = None,
    ) -> Webhook:
        """Subscribe ``endpoint`` to events, optionally scoped to one object."""
        _require(team_id)
        _require(endpoint, message="endpoint URL is required")
        _require(events, message="at least one event is required")
        body = _compact(
            {
                "endpoint": endpoint,
                "events": events,
                "space_id": space_id,
                "list_id": list_id,
                "task_id": task_id,
            }
        )
        with _operation("create webhook"):
            return self._client.post(f"/v2/team/{team_id}/webhook", body, Webhook)

    def update(
        self,
        webhook_id: str,
        endpoint: str | None = None,
        events: builtins.list[str] | None = None,
        status: str | None = None,
    ) -> Webhook:
        _require(webhook_id)
        body = _compact({"endpoint": endpoint, "events": events or None, "status": status})
        with _operation("update webhook"):
            return self._client.put(f"/v2/webhook/{webhook_id}", body, Webhook)

    def delete(self, webhook_id: str) -> None:
        _require(webhook_id)
        with _operation("delete webhook"):
            self._client.delete(f"/v2/webhook/{webhook_id}")


class GoalOperations(_Operations):
    """Goal endpoints."""

    def list(self, team_id: str, include_completed: bool = False) -> list[Goal]:
        _require(team_id)
        path = with_query(f"/v2/team/{team_id}/goal", {"include_completed": include_completed})
        with _operation("list goals"):
            return self._client.get(path, list_of(Goal, "goals"))

    def get(self, goal_id: str) -> Goal:
        _require(goal_id)
        with _operation("get goal"):
            return self._client.get(f"/v2/goal/{goal_id}", Goal)

    def create(
        self,
        team_id: str,
        name: str,
        due_date: int | None = None,
        description: str | None = None,
        owners: builtins.list[int] | None = None,
    ) -> Goal:
        _require(team_id)
        _require(name, message=NAME_REQUIRED)
        body = _compact(
            {
                "name": name,
                "due_date": due_date,
                "description": description,
                "owners": owners or None,
                "multiple_owners": bool(owners and len(owners) > 1),
            }
        )
        with _operation("create goal"):
            return self._client.post(f"/v2/team/{team_id}/goal", body, Goal)

    def update(self, goal_id: str, **fields: Any) -> Goal:
        _require(goal_id)
        with _operation("update goal"):
            return self._client.put(f"/v2/goal/{goal_id}", _compact(fields), Goal)

    def delete(self, goal_id: str) -> None:
        _require(goal_id)
        with _operation("delete goal"):
            self._client.delete(f"/v2/goal/{goal_id}")


# =============================================================================
# Members & Tags
# =============================================================================


class MemberOperations(_Operations):
    """Who can see a task or list."""

    def list(self, list_id: str | None = None, task_id: str | None = None) -> list[User]:
        """Members of exactly one list or one task."""
        if bool(list_id) == bool(task_id):
            raise ValidationError("exactly one of list ID or task ID is required")
        if task_id:
            return self.list_for_task(task_id)
        return self.list_for_list(list_id or "")

    def list_for_list(self, list_id: str) -> builtins.list[User]:
        _require(list_id)
        with _operation("list list members"):
            return self._client.get(f"/v2/list/{list_id}/member", list_of(User, "members"))

    def list_for_task(self, task_id: str) -> builtins.list[User]:
        _require(task_id)
        with _operation("list task members"):
            return self._client.get(f"/v2/task/{task_id}/member", list_of(User, "members"))

    def list_for_team(self, team_id: str) -> builtins.list[User]:
        """Every member of a team."""
        _require(team_id)
        with _operation("list members"):
            workspace = self._client.get(f"/v2/team/{team_id}", _team_of)
        return workspace.members


def _team_of(payload: dict[str, Any]) -> Workspace:
    # GET /v2/team/{id} wraps the team: {"team": {...}}
    return Workspace.from_dict(payload["team"])


class GroupOperations(_Operations):
    """User groups."""

    def list(self) -> list[UserGroup]:
        with _operation("list user groups"):
            return self._client.get("/v2/group", list_of(UserGroup, "groups"))

    def create(self, team_id: str, name: str, member_ids: builtins.list[int] | None = None) -> UserGroup:
        _require(team_id)
        _require(name, message=NAME_REQUIRED)
        body = {"name": name, "members": member_ids or []}
        with _operation("create user group"):
            return self._client.post(f"/v2/team/{team_id}/group", body, UserGroup)

    def update(
        self,
        group_id: str,
        name: str | None = None,
        add_members: builtins.list[int] | None = None,
        remove_members: builtins.list[int] | None = None,
    ) -> UserGroup:
        """Rename a group and/or change its membership."""
        _require(group_id)
        body: dict[str, Any] = _compact({"name": name})
        if add_members or remove_members:
            body["members"] = {"add": add_members or [], "rem": remove_members or []}
        with _operation("update user group"):
            return self._client.put(f"/v2/group/{group_id}", body, UserGroup)

    def delete(self, group_id: str) -> None:
        _require(group_id)
        with _operation("delete user group"):
            self._client.delete(f"/v2/group/{group_id}")


class RoleOperations(_Operations):
    """Custom roles."""

    def list(self, team_id: str) -> list[CustomRole]:
        _require(team_id)
        with _operation("list custom roles"):
            return self._client.get(f"/v2/team/{team_id}/customroles", list_of(CustomRole, "custom_roles"))


class TagOperations(_Operations):
    """Space tags and task tagging."""

    def list(self, space_id: str) -> list[Tag]:
        _require(space_id)
        with _operation("list tags"):
            return self._client.get(f"/v2/space/{space_id}/tag", list_of(Tag, "tags"))

    def add_to_task(self, task_id: str, tag_name: str) -> None:
        _require(task_id, tag_name)
        with _operation("add tag to task"):
            self._client.post(f"/v2/task/{task_id}/tag/{_quote(tag_name)}")

    def remove_from_task(self, task_id: str, tag_name: str) -> None:
        _require(task_id, tag_name)
        with _operation("remove tag from task"):
            self._client.delete(f"/v2/task/{task_id}/tag/{_quote(tag_name)}")


# =============================================================================
# Chat & Docs (v3)
# =============================================================================


class ChatOperations(_Operations):
    """Chat channels and messages (v3)."""

    def list_channels(self, cursor: str | None = None, limit: int | None = None) -> CursorPage[ChatChannel]:
        path = with_query(self._v3_path("/chat/channels"), {"cursor": cursor, "limit": limit})
        with _operation("list chat channels"):
            return self._client.get(path, cursor_page_of(ChatChannel))

    def get_channel(self, channel_id: str) -> ChatChannel:
        _require(channel_id)
        path = self._v3_path(f"/chat/channels/{channel_id}")
        with _operation("get chat channel"):
            return self._client.get(path, ChatChannel)

    def list_messages(
        self, channel_id: str, cursor: str | None = None, limit: int | None = None
    ) -> CursorPage[ChatMessage]:
        _require(channel_id)
        path = with_query(
            self._v3_path(f"/chat/channels/{channel_id}/messages"),
            {"cursor": cursor, "limit": limit},
        )
        with _operation("list chat messages"):
            return self._client.get(path, cursor_page_of(ChatMessage))

    def send_message(self, channel_id: str, content: str, content_format: str = "text/md") -> ChatMessage:
        _require(channel_id)
        _require(content, message="message content is required")
        path = self._v3_path(f"/chat/channels/{channel_id}/messages")
        body = {"type": "message", "content": content, "content_format": content_format}
        with _operation("send chat message"):
            return self._client.post(path, body, ChatMessage)

    def delete_message(self, message_id: str) -> None:
        _require(message_id)
        path = self._v3_path(f"/chat/messages/{message_id}")
        with _operation("delete chat message"):
            self._client.delete(path)


class DocOperations(_Operations):
    """Docs and pages (v3)."""

    def search(self, cursor: str | None = None, limit: int | None = None) -> CursorPage[Doc]:
        path = with_query(self._v3_path("/docs"), {"cursor": cursor, "limit": limit})
        with _operation("search docs"):
            return self._client.get(path, cursor_page_of(Doc, "docs"))

    def get(self, doc_id: str) -> Doc:
        _require(doc_id)
        path = self._v3_path(f"/docs/{doc_id}")
        with _operation("get doc"):
            return self._client.get(path, Doc)

    def pages(self, doc_id: str, max_page_depth: int | None = None) -> list[DocPage]:
        """Pages of a doc, with content."""
        _require(doc_id)
        path = with_query(self._v3_path(f"/docs/{doc_id}/pages"), {"max_page_depth": max_page_depth})
        with _operation("get doc pages"):
            return self._client.get(path, list_of(DocPage))

    def create(self, name: str, parent_id: str | None = None, parent_type: int | None = None) -> Doc:
        """Create a doc, at workspace level unless a parent is given."""
        _require(name, message=NAME_REQUIRED)
        body: dict[str, Any] = {"name": name}
        if parent_id:
            body["parent"] = {"id": parent_id, "type": parent_type or 4}
        path = self._v3_path("/docs")
        with _operation("create doc"):
            return self._client.post(path, body, Doc)
