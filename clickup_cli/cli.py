"""
ClickUp CLI - Opinionated command-line interface.

This layer provides the user-facing CLI commands, using the SDK layer
for all operations. It handles:
- Argument parsing
- Credential, workspace and team resolution
- Output in human, plain (TSV) or JSON mode
- Mapping errors to messages and exit codes
"""

import argparse
import getpass
import logging
import sys
from collections.abc import Callable
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, BinaryIO

from clickup_cli import __version__, config, outfmt
from clickup_cli.core.client import APIError, CLIError, ValidationError, unwrap
from clickup_cli.core.types import Comment, Task, TimeEntry, User, UserGroup
from clickup_cli.sdk import ATTACHMENT_PARENT_TYPES, ClickUpClient

logger = logging.getLogger(__name__)

Handler = Callable[[ClickUpClient, argparse.Namespace], None]

AUTH_HINT = "Hint: check your API key; run: clickup auth set-key"
PRIORITIES = {"urgent": 1, "high": 2, "normal": 3, "low": 4}


# =============================================================================
# Output Helpers
# =============================================================================


def list_output(
    args: argparse.Namespace,
    data: Any,
    headers: list[str],
    rows: list[list[Any]],
    widths: list[int],
    empty: str = "No results.",
) -> None:
    """Print a collection in the selected mode."""
    if args.mode.json:
        outfmt.write_json(data)
    elif args.mode.plain:
        outfmt.write_plain(headers, rows)
    elif not rows:
        print(empty)
    else:
        outfmt.table_output(headers, rows, widths)


def item_output(args: argparse.Namespace, data: Any, fields: list[tuple[str, Any]]) -> None:
    """Print a single resource in the selected mode."""
    if args.mode.json:
        outfmt.write_json(data)
    elif args.mode.plain:
        outfmt.write_plain([label.upper() for label, _ in fields], [[value for _, value in fields]])
    else:
        for label, value in fields:
            if value not in (None, "", []):
                print(f"{label}: {value}")


def done_output(args: argparse.Namespace, message: str, data: dict[str, Any]) -> None:
    """Print the result of a mutation that returns nothing of interest."""
    if args.mode.json:
        outfmt.write_json(data)
    elif args.mode.plain:
        outfmt.write_plain(list(data), [list(data.values())])
    else:
        print(message)


def fmt_ms(value: str | int | None) -> str:
    """Render a Unix-millisecond timestamp as local time."""
    if value in (None, ""):
        return ""
    try:
        ts = int(value) / 1000
    except (TypeError, ValueError):
        return str(value)
    return datetime.fromtimestamp(ts).strftime("%Y-%m-%d %H:%M")


def fmt_duration(ms: int) -> str:
    """Render a duration in milliseconds as e.g. "1h 05m"."""
    if ms < 0:
        return "running"
    minutes = ms // 60000
    hours, minutes = divmod(minutes, 60)
    if hours:
        return f"{hours}h {minutes:02d}m"
    return f"{minutes}m"


def parse_ms(value: str) -> int:
    """Argparse type: "now", Unix ms, or an ISO date/time (local time)."""
    if value == "now":
        return int(datetime.now(timezone.utc).timestamp() * 1000)
    if value.isdigit():
        return int(value)
    try:
        return int(datetime.fromisoformat(value).timestamp() * 1000)
    except ValueError:
        raise argparse.ArgumentTypeError(
            f"invalid time {value!r} (use 'now', Unix ms, or YYYY-MM-DD[THH:MM])"
        ) from None


def parse_priority(value: str) -> int:
    """Argparse type: 1-4 or urgent/high/normal/low."""
    if value.lower() in PRIORITIES:
        return PRIORITIES[value.lower()]
    if value in ("1", "2", "3", "4"):
        return int(value)
    raise argparse.ArgumentTypeError(f"invalid priority {value!r} (use 1-4 or urgent/high/normal/low)")


def require_team(args: argparse.Namespace) -> str:
    """Team ID from --team, CLICKUP_TEAM_ID or the config file."""
    team_id = config.resolve_team_id(args.team)
    if not team_id:
        raise ValidationError("no team ID configured; run: clickup auth set-team <TEAM_ID>")
    return team_id


def confirm_delete(args: argparse.Namespace, warning: str, scripted_ok: bool = False) -> None:
    """
    Refuse a destructive command unless --force was given.

    With ``scripted_ok``, JSON and plain output modes count as confirmation.
    """
    if args.force or (scripted_ok and not args.mode.human):
        return
    print(f"Warning: {warning}", file=sys.stderr)
    raise ValidationError("operation cancelled: use --force to confirm")


def _parse_user_ids(value: str) -> list[int]:
    """Argparse type: comma-separated user IDs."""
    try:
        return [int(part) for part in (p.strip() for p in value.split(",")) if part]
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid user ID list {value!r}") from None


def _split_names(value: str) -> list[str]:
    """Argparse type: comma-separated names or IDs."""
    return [part.strip() for part in value.split(",") if part.strip()]


def no_auth(func: Handler) -> Handler:
    """Mark a handler that runs without an API key."""
    func.needs_auth = False  # type: ignore[attr-defined]
    return func


def _print_help(parser: argparse.ArgumentParser) -> Handler:
    return no_auth(lambda _c, _a: parser.print_help())


def _task_rows(tasks: list[Task]) -> list[list[Any]]:
    return [[t.id, t.name, t.status, t.priority or "", fmt_ms(t.due_date)] for t in tasks]


def _comment_rows(comments: list[Comment]) -> list[list[Any]]:
    return [
        [c.id, c.user.username if c.user else "", fmt_ms(c.date), c.text.replace("\n", " ")] for c in comments
    ]


def _entry_fields(entry: TimeEntry) -> list[tuple[str, Any]]:
    return [
        ("ID", entry.id),
        ("Task", entry.task.name if entry.task else ""),
        ("Duration", fmt_duration(entry.duration)),
        ("Start", fmt_ms(entry.start)),
        ("End", fmt_ms(entry.end)),
        ("Description", entry.description),
    ]


# =============================================================================
# Auth & Workspaces
# =============================================================================


@no_auth
def cmd_auth_set_key(_client: ClickUpClient, args: argparse.Namespace) -> None:
    """Store the API key in the credentials file."""
    if args.key:
        print("Warning: passing keys as arguments exposes them in shell history. Use --stdin instead.", file=sys.stderr)
        api_key = args.key
    elif args.stdin or not sys.stdin.isatty():
        api_key = sys.stdin.read()
    else:
        api_key = getpass.getpass("Enter API key: ")

    config.set_api_key(api_key)
    path = config.credentials_path()
    logger.debug("stored API key in %s", path)
    done_output(args, f"API key stored in {path}", {"status": "success", "path": str(path)})


@no_auth
def cmd_auth_status(_client: ClickUpClient, args: argparse.Namespace) -> None:
    """Show where credentials and IDs come from."""
    source = config.api_key_source()
    key = config.resolve_api_key()
    status = {
        "has_key": bool(key),
        "source": source,
        "key_redacted": f"{key[:4]}...{key[-4:]}" if len(key) > 8 else None,
        "team_id": config.resolve_team_id(args.team) or None,
        "workspace_id": config.resolve_workspace_id(args.workspace) or None,
        "config_dir": str(config.config_dir()),
    }
    if args.mode.json:
        outfmt.write_json(status)
        return
    if args.mode.plain:
        outfmt.write_plain(list(status), [list(status.values())])
        return

    if source == "env":
        print(f"Status: Using {config.API_KEY_ENV} environment variable")
    elif key:
        print("Status: Authenticated")
    else:
        print("Status: Not authenticated")
        print("Run: clickup auth set-key")
    if status["key_redacted"]:
        print(f"Key: {status['key_redacted']}")
    print(f"Team: {status['team_id'] or '-'}")
    print(f"Workspace: {status['workspace_id'] or '-'}")
    print(f"Config: {status['config_dir']}")


@no_auth
def cmd_auth_remove(_client: ClickUpClient, args: argparse.Namespace) -> None:
    """Remove the stored API key."""
    removed = config.delete_api_key()
    message = "API key removed" if removed else "No stored API key"
    done_output(args, message, {"removed": removed})


@no_auth
def cmd_auth_set_team(_client: ClickUpClient, args: argparse.Namespace) -> None:
    """Store the default team (workspace) ID."""
    config.set_team_id(args.team_id)
    if args.workspace_too:
        config.set_workspace_id(args.team_id)
    done_output(args, f"Team ID set to {args.team_id}", {"team_id": args.team_id})


@no_auth
def cmd_auth_set_workspace(_client: ClickUpClient, args: argparse.Namespace) -> None:
    """Store the workspace ID used by v3 endpoints."""
    config.set_workspace_id(args.workspace_id)
    done_output(args, f"Workspace ID set to {args.workspace_id}", {"workspace_id": args.workspace_id})


def cmd_auth_whoami(client: ClickUpClient, args: argparse.Namespace) -> None:
    """Show the authorized user."""
    user = client.auth.whoami()
    item_output(args, user, [("ID", user.id), ("Username", user.username), ("Email", user.email)])


@no_auth
def cmd_auth_token(client: ClickUpClient, args: argparse.Namespace) -> None:
    """Exchange an OAuth code for an access token."""
    token = client.auth.token(args.client_id, args.client_secret, args.code)
    item_output(args, token, [("Access token", token.access_token), ("Type", token.token_type)])


@no_auth
def cmd_version(_client: ClickUpClient, args: argparse.Namespace) -> None:
    """Print the version."""
    if args.mode.json:
        outfmt.write_json({"version": __version__})
    else:
        print(f"clickup-cli {__version__}")


def cmd_workspaces_list(client: ClickUpClient, args: argparse.Namespace) -> None:
    """List workspaces."""
    workspaces = client.workspaces.list()
    list_output(
        args,
        workspaces,
        ["ID", "NAME", "MEMBERS"],
        [[w.id, w.name, len(w.members)] for w in workspaces],
        [12, 40, 8],
        empty="No workspaces found.",
    )


def cmd_workspaces_plan(client: ClickUpClient, args: argparse.Namespace) -> None:
    """Show the workspace plan."""
    plan = client.workspaces.plan(args.team_id or require_team(args))
    item_output(args, plan, [("Plan", plan.get("plan_name")), ("Plan ID", plan.get("plan_id"))])


def cmd_workspaces_seats(client: ClickUpClient, args: argparse.Namespace) -> None:
    """Show workspace seat usage."""
    seats = client.workspaces.seats(args.team_id or require_team(args))
    members = seats.get("members") or {}
    guests = seats.get("guests") or {}
    item_output(
        args,
        seats,
        [
            ("Members filled", members.get("filled_members_seats")),
            ("Members total", members.get("total_member_seats")),
            ("Guests filled", guests.get("filled_guest_seats")),
            ("Guests total", guests.get("total_guest_seats")),
        ],
    )


# =============================================================================
# Spaces, Folders, Lists
# =============================================================================


def cmd_spaces_list(client: ClickUpClient, args: argparse.Namespace) -> None:
    """List spaces in the team."""
    spaces = client.spaces.list(require_team(args), archived=args.archived)
    list_output(
        args,
        spaces,
        ["ID", "NAME", "PRIVATE"],
        [[s.id, s.name, "yes" if s.private else "no"] for s in spaces],
        [12, 40, 7],
        empty="No spaces found.",
    )


def cmd_spaces_get(client: ClickUpClient, args: argparse.Namespace) -> None:
    """Get a space."""
    space = client.spaces.get(args.space_id)
    item_output(
        args,
        space,
        [("ID", space.id), ("Name", space.name), ("Private", space.private), ("Statuses", ", ".join(space.statuses))],
    )


def cmd_spaces_create(client: ClickUpClient, args: argparse.Namespace) -> None:
    """Create a space."""
    space = client.spaces.create(require_team(args), args.name, private=args.private)
    item_output(args, space, [("ID", space.id), ("Name", space.name)])


def cmd_spaces_update(client: ClickUpClient, args: argparse.Namespace) -> None:
    """Update a space."""
    fields: dict[str, Any] = {}
    if args.name:
        fields["name"] = args.name
    if args.private is not None:
        fields["private"] = args.private
    space = client.spaces.update(args.space_id, **fields)
    item_output(args, space, [("ID", space.id), ("Name", space.name), ("Private", space.private)])


def cmd_spaces_delete(client: ClickUpClient, args: argparse.Namespace) -> None:
    """Delete a space."""
    confirm_delete(args, f"this permanently deletes space {args.space_id} and everything in it", scripted_ok=True)
    client.spaces.delete(args.space_id)
    done_output(args, f"Deleted space {args.space_id}", {"deleted": args.space_id})


def cmd_folders_list(client: ClickUpClient, args: argparse.Namespace) -> None:
    """List folders in a space."""
    folders = client.folders.list(args.space_id, archived=args.archived)
    list_output(
        args,
        folders,
        ["ID", "NAME", "LISTS"],
        [[f.id, f.name, len(f.lists)] for f in folders],
        [12, 40, 5],
        empty="No folders found.",
    )


def cmd_folders_get(client: ClickUpClient, args: argparse.Namespace) -> None:
    """Get a folder."""
    folder = client.folders.get(args.folder_id)
    item_output(
        args,
        folder,
        [
            ("ID", folder.id),
            ("Name", folder.name),
            ("Space", folder.space.name if folder.space else ""),
            ("Lists", ", ".join(lst.name for lst in folder.lists)),
        ],
    )


def cmd_folders_create(client: ClickUpClient, args: argparse.Namespace) -> None:
    """Create a folder."""
    folder = client.folders.create(args.space_id, args.name)
    item_output(args, folder, [("ID", folder.id), ("Name", folder.name)])


def cmd_folders_update(client: ClickUpClient, args: argparse.Namespace) -> None:
    """Rename a folder."""
    folder = client.folders.update(args.folder_id, args.name)
    item_output(args, folder, [("ID", folder.id), ("Name", folder.name)])


def cmd_folders_delete(client: ClickUpClient, args: argparse.Namespace) -> None:
    """Delete a folder."""
    confirm_delete(args, f"deleting folder {args.folder_id} moves its lists to folderless", scripted_ok=True)
    client.folders.delete(args.folder_id)
    done_output(args, f"Deleted folder {args.folder_id}", {"deleted": args.folder_id})


def _check_list_parent(args: argparse.Namespace) -> None:
    if bool(args.folder) == bool(args.space):
        raise ValidationError("exactly one of --folder or --space is required")


def cmd_lists_list(client: ClickUpClient, args: argparse.Namespace) -> None:
    """List lists in a folder, or folderless lists in a space."""
    _check_list_parent(args)
    if args.folder:
        lists = client.lists.list_by_folder(args.folder, archived=args.archived)
    else:
        lists = client.lists.list_folderless(args.space, archived=args.archived)
    list_output(
        args,
        lists,
        ["ID", "NAME", "TASKS"],
        [[lst.id, lst.name, lst.task_count if lst.task_count is not None else ""] for lst in lists],
        [12, 40, 5],
        empty="No lists found.",
    )


def cmd_lists_get(client: ClickUpClient, args: argparse.Namespace) -> None:
    """Get a list."""
    lst = client.lists.get(args.list_id)
    item_output(
        args,
        lst,
        [
            ("ID", lst.id),
            ("Name", lst.name),
            ("Folder", lst.folder.name if lst.folder else ""),
            ("Space", lst.space.name if lst.space else ""),
            ("Tasks", lst.task_count),
            ("Content", lst.content),
        ],
    )


def cmd_lists_create(client: ClickUpClient, args: argparse.Namespace) -> None:
    """Create a list in a folder or directly in a space."""
    _check_list_parent(args)
    if args.folder:
        lst = client.lists.create_in_folder(args.folder, args.name, content=args.content)
    else:
        lst = client.lists.create_folderless(args.space, args.name, content=args.content)
    item_output(args, lst, [("ID", lst.id), ("Name", lst.name)])


def cmd_lists_update(client: ClickUpClient, args: argparse.Namespace) -> None:
    """Update a list."""
    lst = client.lists.update(args.list_id, name=args.name, content=args.content)
    item_output(args, lst, [("ID", lst.id), ("Name", lst.name)])


def cmd_lists_delete(client: ClickUpClient, args: argparse.Namespace) -> None:
    """Delete a list."""
    confirm_delete(args, f"this permanently deletes list {args.list_id} and its tasks")
    client.lists.delete(args.list_id)
    done_output(args, f"Deleted list {args.list_id}", {"deleted": args.list_id})


def cmd_lists_add_task(client: ClickUpClient, args: argparse.Namespace) -> None:
    """Add a task to an additional list."""
    client.lists.add_task(args.list_id, args.task_id)
    done_output(
        args,
        f"Added task {args.task_id} to list {args.list_id}",
        {"list_id": args.list_id, "task_id": args.task_id},
    )


def cmd_lists_remove_task(client: ClickUpClient, args: argparse.Namespace) -> None:
    """Remove a task from an additional list."""
    client.lists.remove_task(args.list_id, args.task_id)
    done_output(
        args,
        f"Removed task {args.task_id} from list {args.list_id}",
        {"list_id": args.list_id, "task_id": args.task_id},
    )


# =============================================================================
# Tasks
# =============================================================================


def _task_fields(task: Task) -> list[tuple[str, Any]]:
    return [
        ("ID", task.id),
        ("Name", task.name),
        ("Status", task.status),
        ("Priority", task.priority),
        ("Due", fmt_ms(task.due_date)),
        ("List", task.home_list.name if task.home_list else ""),
        ("Assignees", ", ".join(u.username for u in task.assignees)),
        ("Tags", ", ".join(task.tags)),
        ("URL", task.url),
        ("Description", task.description),
    ]


def cmd_tasks_list(client: ClickUpClient, args: argparse.Namespace) -> None:
    """List tasks in a list."""
    tasks = client.tasks.list(args.list_id, status=args.status, assignee=args.assignee, page=args.page)
    list_output(
        args,
        tasks,
        ["ID", "NAME", "STATUS", "PRIORITY", "DUE"],
        _task_rows(tasks),
        [12, 40, 14, 8, 16],
        empty="No tasks found.",
    )


def cmd_tasks_get(client: ClickUpClient, args: argparse.Namespace) -> None:
    """Get a task."""
    task = client.tasks.get(args.task_id)
    item_output(args, task, _task_fields(task))


def cmd_tasks_create(client: ClickUpClient, args: argparse.Namespace) -> None:
    """Create a task."""
    task = client.tasks.create(
        args.list_id,
        args.name,
        description=args.description,
        assignees=args.assignee,
        priority=args.priority,
        due_date=args.due,
        status=args.status,
    )
    item_output(args, task, [("ID", task.id), ("Name", task.name), ("URL", task.url)])


def cmd_tasks_update(client: ClickUpClient, args: argparse.Namespace) -> None:
    """Update a task."""
    task = client.tasks.update(
        args.task_id,
        name=args.name,
        description=args.description,
        status=args.status,
        priority=args.priority,
        due_date=args.due,
    )
    item_output(args, task, _task_fields(task))


def cmd_tasks_delete(client: ClickUpClient, args: argparse.Namespace) -> None:
    """Delete a task."""
    confirm_delete(args, f"this permanently deletes task {args.task_id}")
    client.tasks.delete(args.task_id)
    done_output(args, f"Deleted task {args.task_id}", {"deleted": args.task_id})


def cmd_tasks_search(client: ClickUpClient, args: argparse.Namespace) -> None:
    """Search tasks across the team."""
    tasks = client.tasks.search(
        require_team(args),
        statuses=args.status,
        assignees=args.assignee,
        tags=args.tag,
        include_closed=args.include_closed,
        page=args.page,
    )
    list_output(
        args,
        tasks,
        ["ID", "NAME", "STATUS", "PRIORITY", "DUE"],
        _task_rows(tasks),
        [12, 40, 14, 8, 16],
        empty="No tasks found.",
    )


def cmd_tasks_time_in_status(client: ClickUpClient, args: argparse.Namespace) -> None:
    """Show how long a task spent in each status."""
    data = client.tasks.time_in_status(args.task_id)
    history = data.get("status_history") or []
    rows = [
        [h.get("status", ""), fmt_duration(int((h.get("total_time") or {}).get("by_minute", 0)) * 60000)]
        for h in history
    ]
    list_output(args, data, ["STATUS", "TIME"], rows, [24, 12], empty="No status history.")


def cmd_tasks_merge(client: ClickUpClient, args: argparse.Namespace) -> None:
    """Merge tasks into a target task."""
    client.tasks.merge(args.target_id, args.source_ids)
    done_output(
        args,
        f"Merged {len(args.source_ids)} task(s) into {args.target_id}",
        {"target_id": args.target_id, "merged": args.source_ids},
    )


def cmd_tasks_move(client: ClickUpClient, args: argparse.Namespace) -> None:
    """Move a task to another home list."""
    client.tasks.move(args.task_id, args.list_id)
    done_output(
        args,
        f"Moved task {args.task_id} to list {args.list_id}",
        {"task_id": args.task_id, "list_id": args.list_id},
    )


def _status_minutes(entry: dict[str, Any]) -> int:
    return int((entry.get("total_time") or {}).get("by_minute", 0))


def cmd_tasks_bulk_time_in_status(client: ClickUpClient, args: argparse.Namespace) -> None:
    """Show time in status for several tasks."""
    data = client.tasks.bulk_time_in_status(args.task_ids)
    rows = []
    for task_id, times in data.items():
        for h in times.get("status_history") or []:
            rows.append([task_id, h.get("status", ""), fmt_duration(_status_minutes(h) * 60000), ""])
        current = times.get("current_status")
        if current:
            rows.append([task_id, current.get("status", ""), fmt_duration(_status_minutes(current) * 60000), "yes"])
    list_output(args, data, ["TASK_ID", "STATUS", "TIME", "CURRENT"], rows, [12, 24, 12, 7], empty="No status history.")


def cmd_tasks_from_template(client: ClickUpClient, args: argparse.Namespace) -> None:
    """Create a task from a template."""
    task = client.tasks.create_from_template(args.list_id, args.template_id, name=args.name)
    item_output(args, task, [("ID", task.id), ("Name", task.name), ("URL", task.url)])


# =============================================================================
# Comments
# =============================================================================


def cmd_comments_list(client: ClickUpClient, args: argparse.Namespace) -> None:
    """List comments on a task."""
    comments = client.comments.list(args.task_id)
    list_output(
        args,
        comments,
        ["ID", "USER", "DATE", "TEXT"],
        _comment_rows(comments),
        [14, 16, 16, 60],
        empty="No comments.",
    )


def cmd_comments_add(client: ClickUpClient, args: argparse.Namespace) -> None:
    """Add a comment to a task."""
    comment = client.comments.add(args.task_id, args.text, notify_all=args.notify_all)
    item_output(args, comment, [("ID", comment.id), ("Date", fmt_ms(comment.date))])


def cmd_comments_update(client: ClickUpClient, args: argparse.Namespace) -> None:
    """Edit a comment."""
    client.comments.update(args.comment_id, args.text, resolved=args.resolved)
    done_output(args, f"Updated comment {args.comment_id}", {"updated": args.comment_id})


def cmd_comments_delete(client: ClickUpClient, args: argparse.Namespace) -> None:
    """Delete a comment."""
    confirm_delete(args, f"this permanently deletes comment {args.comment_id}")
    client.comments.delete(args.comment_id)
    done_output(args, f"Deleted comment {args.comment_id}", {"deleted": args.comment_id})


def cmd_comments_replies(client: ClickUpClient, args: argparse.Namespace) -> None:
    """List threaded replies."""
    replies = client.comments.replies(args.comment_id)
    list_output(
        args,
        replies,
        ["ID", "USER", "DATE", "TEXT"],
        _comment_rows(replies),
        [14, 16, 16, 60],
        empty="No replies.",
    )


def cmd_comments_reply(client: ClickUpClient, args: argparse.Namespace) -> None:
    """Reply to a comment."""
    reply = client.comments.reply(args.comment_id, args.text)
    item_output(args, reply, [("ID", reply.id), ("Date", fmt_ms(reply.date))])


# =============================================================================
# Time tracking
# =============================================================================


def cmd_time_list(client: ClickUpClient, args: argparse.Namespace) -> None:
    """List time entries."""
    entries = client.time.list(require_team(args), task_id=args.task, start_date=args.start, end_date=args.end)
    list_output(
        args,
        entries,
        ["ID", "TASK", "DURATION", "START", "DESCRIPTION"],
        [
            [e.id, e.task.name if e.task else "", fmt_duration(e.duration), fmt_ms(e.start), e.description]
            for e in entries
        ],
        [20, 30, 10, 16, 30],
        empty="No time entries.",
    )


def cmd_time_log(client: ClickUpClient, args: argparse.Namespace) -> None:
    """Log a finished time entry."""
    entry = client.time.log(
        require_team(args),
        args.task_id,
        args.duration_ms,
        args.start,
        description=args.description,
        billable=args.billable,
    )
    item_output(args, entry, _entry_fields(entry))


def cmd_time_get(client: ClickUpClient, args: argparse.Namespace) -> None:
    """Get a time entry."""
    entry = client.time.get(require_team(args), args.entry_id)
    item_output(args, entry, _entry_fields(entry))


def cmd_time_current(client: ClickUpClient, args: argparse.Namespace) -> None:
    """Show the running timer."""
    entry = client.time.current(require_team(args))
    if entry is None:
        done_output(args, "No timer running", {"running": False})
        return
    item_output(args, entry, _entry_fields(entry))


def cmd_time_start(client: ClickUpClient, args: argparse.Namespace) -> None:
    """Start a timer."""
    entry = client.time.start(require_team(args), task_id=args.task_id, description=args.description)
    item_output(args, entry, _entry_fields(entry))


def cmd_time_stop(client: ClickUpClient, args: argparse.Namespace) -> None:
    """Stop the running timer."""
    entry = client.time.stop(require_team(args))
    item_output(args, entry, _entry_fields(entry))


def cmd_time_delete(client: ClickUpClient, args: argparse.Namespace) -> None:
    """Delete a time entry."""
    confirm_delete(args, f"this permanently deletes time entry {args.entry_id}")
    client.time.delete(require_team(args), args.entry_id)
    done_output(args, f"Deleted time entry {args.entry_id}", {"deleted": args.entry_id})


def cmd_time_update(client: ClickUpClient, args: argparse.Namespace) -> None:
    """Update a time entry."""
    if args.tags and not args.tag_action:
        raise ValidationError("--tags needs --tag-action add or remove")
    entry = client.time.update(
        require_team(args),
        args.entry_id,
        description=args.description,
        duration_ms=args.duration,
        start_ms=args.start,
        end_ms=args.end,
        billable=args.billable,
        tags=args.tags,
        tag_action=args.tag_action,
    )
    item_output(args, entry, _entry_fields(entry))


def cmd_time_history(client: ClickUpClient, args: argparse.Namespace) -> None:
    """Show the change history of a time entry."""
    changes = client.time.history(require_team(args), args.entry_id)
    list_output(
        args,
        changes,
        ["FIELD", "BEFORE", "AFTER", "DATE", "USER"],
        [[c.field, c.before, c.after, fmt_ms(c.date), c.user.username if c.user else ""] for c in changes],
        [16, 20, 20, 16, 16],
        empty="No history.",
    )


def cmd_time_tags(client: ClickUpClient, args: argparse.Namespace) -> None:
    """List tags used on time entries."""
    tags = client.time.tags(require_team(args))
    list_output(args, tags, ["NAME"], [[t.name] for t in tags], [30], empty="No tags.")


def cmd_time_add_tags(client: ClickUpClient, args: argparse.Namespace) -> None:
    """Tag time entries."""
    client.time.add_tags(require_team(args), args.entry_ids, args.tags)
    done_output(
        args,
        f"Tags added to {len(args.entry_ids)} time entries",
        {"entry_ids": args.entry_ids, "tags": args.tags},
    )


def cmd_time_remove_tags(client: ClickUpClient, args: argparse.Namespace) -> None:
    """Untag time entries."""
    client.time.remove_tags(require_team(args), args.entry_ids, args.tags)
    done_output(
        args,
        f"Tags removed from {len(args.entry_ids)} time entries",
        {"entry_ids": args.entry_ids, "tags": args.tags},
    )


def cmd_time_rename_tag(client: ClickUpClient, args: argparse.Namespace) -> None:
    """Rename a time entry tag."""
    client.time.rename_tag(require_team(args), args.old_name, args.new_name)
    done_output(
        args,
        f"Tag renamed: {args.old_name} -> {args.new_name}",
        {"old_name": args.old_name, "new_name": args.new_name},
    )


# =============================================================================
# Attachments
# =============================================================================


def _open_upload(path: str) -> BinaryIO:
    file_path = Path(path)
    if not file_path.is_file():
        raise ValidationError(f"file not found: {path}")
    try:
        return file_path.open("rb")
    except OSError as e:
        raise ValidationError(f"open file: {e}") from e


def cmd_attachments_upload(client: ClickUpClient, args: argparse.Namespace) -> None:
    """Upload a file to a task."""
    with _open_upload(args.file) as stream:
        attachment = client.attachments.upload(args.task_id, stream, args.name or args.file)
    item_output(args, attachment, [("ID", attachment.id), ("Title", attachment.title), ("URL", attachment.url)])


def cmd_attachments_list(client: ClickUpClient, args: argparse.Namespace) -> None:
    """List attachments on a task, list, folder or space."""
    attachments = client.attachments.list(args.parent_type, args.parent_id)
    list_output(
        args,
        attachments,
        ["ID", "TITLE", "SIZE", "URL"],
        [[a.id, a.title, a.size, a.url] for a in attachments],
        [24, 30, 10, 60],
        empty="No attachments.",
    )


def cmd_attachments_create(client: ClickUpClient, args: argparse.Namespace) -> None:
    """Upload a file to a task, list, folder or space."""
    with _open_upload(args.file) as stream:
        attachment = client.attachments.create(args.parent_type, args.parent_id, stream, args.name or args.file)
    item_output(args, attachment, [("ID", attachment.id), ("Title", attachment.title), ("URL", attachment.url)])


# =============================================================================
# Webhooks & Goals
# =============================================================================


def cmd_webhooks_list(client: ClickUpClient, args: argparse.Namespace) -> None:
    """List webhooks."""
    webhooks = client.webhooks.list(require_team(args))
    list_output(
        args,
        webhooks,
        ["ID", "ENDPOINT", "STATUS", "EVENTS"],
        [[w.id, w.endpoint, w.status or "", ",".join(w.events)] for w in webhooks],
        [36, 40, 10, 40],
        empty="No webhooks.",
    )


def cmd_webhooks_create(client: ClickUpClient, args: argparse.Namespace) -> None:
    """Create a webhook."""
    webhook = client.webhooks.create(
        require_team(args),
        args.endpoint,
        args.event or [],
        space_id=args.space,
        list_id=args.list,
        task_id=args.task,
    )
    item_output(args, webhook, [("ID", webhook.id), ("Endpoint", webhook.endpoint), ("Secret", webhook.secret)])


def cmd_webhooks_update(client: ClickUpClient, args: argparse.Namespace) -> None:
    """Update a webhook."""
    webhook = client.webhooks.update(args.webhook_id, endpoint=args.endpoint, events=args.event, status=args.status)
    item_output(args, webhook, [("ID", webhook.id), ("Endpoint", webhook.endpoint), ("Status", webhook.status)])


def cmd_webhooks_delete(client: ClickUpClient, args: argparse.Namespace) -> None:
    """Delete a webhook."""
    confirm_delete(args, f"this permanently deletes webhook {args.webhook_id}")
    client.webhooks.delete(args.webhook_id)
    done_output(args, f"Deleted webhook {args.webhook_id}", {"deleted": args.webhook_id})


def cmd_goals_list(client: ClickUpClient, args: argparse.Namespace) -> None:
    """List goals."""
    goals = client.goals.list(require_team(args), include_completed=args.include_completed)
    list_output(
        args,
        goals,
        ["ID", "NAME", "PROGRESS", "DUE"],
        [[g.id, g.name, f"{g.percent_completed}%", fmt_ms(g.due_date)] for g in goals],
        [36, 40, 8, 16],
        empty="No goals.",
    )


def cmd_goals_get(client: ClickUpClient, args: argparse.Namespace) -> None:
    """Get a goal."""
    goal = client.goals.get(args.goal_id)
    item_output(
        args,
        goal,
        [
            ("ID", goal.id),
            ("Name", goal.name),
            ("Progress", f"{goal.percent_completed}%"),
            ("Due", fmt_ms(goal.due_date)),
            ("Key results", len(goal.key_results)),
            ("Description", goal.description),
        ],
    )


def cmd_goals_create(client: ClickUpClient, args: argparse.Namespace) -> None:
    """Create a goal."""
    goal = client.goals.create(require_team(args), args.name, due_date=args.due, description=args.description)
    item_output(args, goal, [("ID", goal.id), ("Name", goal.name)])


def cmd_goals_update(client: ClickUpClient, args: argparse.Namespace) -> None:
    """Update a goal."""
    goal = client.goals.update(args.goal_id, name=args.name, description=args.description, due_date=args.due)
    item_output(args, goal, [("ID", goal.id), ("Name", goal.name)])


def cmd_goals_delete(client: ClickUpClient, args: argparse.Namespace) -> None:
    """Delete a goal."""
    confirm_delete(args, f"this permanently deletes goal {args.goal_id}")
    client.goals.delete(args.goal_id)
    done_output(args, f"Deleted goal {args.goal_id}", {"deleted": args.goal_id})


# =============================================================================
# Members & Tags
# =============================================================================


def _user_rows(users: list[User]) -> list[list[Any]]:
    return [[u.id, u.username, u.email or ""] for u in users]


def cmd_members_list(client: ClickUpClient, args: argparse.Namespace) -> None:
    """List team members, or the members of a list or task."""
    if args.list or args.task:
        members = client.members.list(list_id=args.list, task_id=args.task)
    else:
        members = client.members.list_for_team(require_team(args))
    list_output(args, members, ["ID", "USERNAME", "EMAIL"], _user_rows(members), [12, 24, 36], empty="No members.")


# =============================================================================
# Groups & Roles
# =============================================================================


def cmd_groups_list(client: ClickUpClient, args: argparse.Namespace) -> None:
    """List user groups."""
    groups = client.groups.list()
    list_output(
        args,
        groups,
        ["ID", "NAME", "MEMBERS"],
        [[g.id, g.name, len(g.members)] for g in groups],
        [36, 30, 8],
        empty="No groups.",
    )


def _group_fields(group: UserGroup) -> list[tuple[str, Any]]:
    return [
        ("ID", group.id),
        ("Name", group.name),
        ("Members", ", ".join(m.username or str(m.id) for m in group.members)),
    ]


def cmd_groups_create(client: ClickUpClient, args: argparse.Namespace) -> None:
    """Create a user group."""
    group = client.groups.create(require_team(args), args.name, member_ids=args.members)
    item_output(args, group, _group_fields(group))


def cmd_groups_update(client: ClickUpClient, args: argparse.Namespace) -> None:
    """Rename a group or change its members."""
    group = client.groups.update(
        args.group_id,
        name=args.name,
        add_members=args.add_members,
        remove_members=args.remove_members,
    )
    item_output(args, group, _group_fields(group))


def cmd_groups_delete(client: ClickUpClient, args: argparse.Namespace) -> None:
    """Delete a user group."""
    confirm_delete(args, f"this permanently deletes group {args.group_id}")
    client.groups.delete(args.group_id)
    done_output(args, f"Deleted group {args.group_id}", {"deleted": args.group_id})


def cmd_roles_list(client: ClickUpClient, args: argparse.Namespace) -> None:
    """List custom roles."""
    roles = client.roles.list(require_team(args))
    list_output(
        args,
        roles,
        ["ID", "NAME", "PERMISSIONS"],
        [[r.id, r.name, len(r.permissions)] for r in roles],
        [12, 30, 11],
        empty="No custom roles.",
    )


def cmd_tags_list(client: ClickUpClient, args: argparse.Namespace) -> None:
    """List tags in a space."""
    tags = client.tags.list(args.space_id)
    list_output(
        args,
        tags,
        ["NAME", "FG", "BG"],
        [[t.name, t.tag_fg or "", t.tag_bg or ""] for t in tags],
        [30, 8, 8],
        empty="No tags.",
    )


def cmd_tags_add(client: ClickUpClient, args: argparse.Namespace) -> None:
    """Tag a task."""
    client.tags.add_to_task(args.task_id, args.tag)
    done_output(args, f"Tagged {args.task_id} with {args.tag}", {"task_id": args.task_id, "tag": args.tag})


def cmd_tags_remove(client: ClickUpClient, args: argparse.Namespace) -> None:
    """Remove a tag from a task."""
    client.tags.remove_from_task(args.task_id, args.tag)
    done_output(args, f"Removed tag {args.tag} from {args.task_id}", {"task_id": args.task_id, "tag": args.tag})


# =============================================================================
# Chat & Docs
# =============================================================================


def _next_cursor_hint(args: argparse.Namespace, next_cursor: str | None) -> None:
    if next_cursor and args.mode.human:
        print(f"\nMore results: --cursor {next_cursor}")


def cmd_chat_channels(client: ClickUpClient, args: argparse.Namespace) -> None:
    """List chat channels."""
    page = client.chat.list_channels(cursor=args.cursor, limit=args.limit)
    list_output(
        args,
        page,
        ["ID", "NAME", "TYPE"],
        [[c.id, c.name, c.type] for c in page.data],
        [24, 40, 12],
        empty="No channels.",
    )
    _next_cursor_hint(args, page.next_cursor)


def cmd_chat_channel(client: ClickUpClient, args: argparse.Namespace) -> None:
    """Get a chat channel."""
    channel = client.chat.get_channel(args.channel_id)
    item_output(
        args,
        channel,
        [("ID", channel.id), ("Name", channel.name), ("Type", channel.type), ("Description", channel.description)],
    )


def cmd_chat_messages(client: ClickUpClient, args: argparse.Namespace) -> None:
    """List messages in a channel."""
    page = client.chat.list_messages(args.channel_id, cursor=args.cursor, limit=args.limit)
    list_output(
        args,
        page,
        ["ID", "USER", "DATE", "CONTENT"],
        [[m.id, m.user_id, fmt_ms(m.date), m.content.replace("\n", " ")] for m in page.data],
        [24, 12, 16, 60],
        empty="No messages.",
    )
    _next_cursor_hint(args, page.next_cursor)


def cmd_chat_send(client: ClickUpClient, args: argparse.Namespace) -> None:
    """Send a message to a channel."""
    message = client.chat.send_message(args.channel_id, args.content)
    item_output(args, message, [("ID", message.id), ("Date", fmt_ms(message.date))])


def cmd_chat_delete(client: ClickUpClient, args: argparse.Namespace) -> None:
    """Delete a chat message."""
    confirm_delete(args, f"this permanently deletes message {args.message_id}")
    client.chat.delete_message(args.message_id)
    done_output(args, f"Deleted message {args.message_id}", {"deleted": args.message_id})


def cmd_docs_search(client: ClickUpClient, args: argparse.Namespace) -> None:
    """List docs in the workspace."""
    page = client.docs.search(cursor=args.cursor, limit=args.limit)
    list_output(
        args,
        page,
        ["ID", "NAME", "CREATED"],
        [[d.id, d.name, fmt_ms(d.date_created)] for d in page.data],
        [24, 40, 16],
        empty="No docs.",
    )
    _next_cursor_hint(args, page.next_cursor)


def cmd_docs_get(client: ClickUpClient, args: argparse.Namespace) -> None:
    """Get a doc."""
    doc = client.docs.get(args.doc_id)
    item_output(args, doc, [("ID", doc.id), ("Name", doc.name), ("Created", fmt_ms(doc.date_created))])


def cmd_docs_pages(client: ClickUpClient, args: argparse.Namespace) -> None:
    """Show the pages of a doc."""
    pages = client.docs.pages(args.doc_id, max_page_depth=args.depth)
    if not args.mode.human:
        list_output(args, pages, ["ID", "NAME"], [[p.id, p.name] for p in pages], [24, 40])
        return
    if not pages:
        print("No pages.")
    for page in pages:
        print(f"# {page.name}\n")
        if page.content:
            print(page.content.rstrip() + "\n")


def cmd_docs_create(client: ClickUpClient, args: argparse.Namespace) -> None:
    """Create a doc."""
    doc = client.docs.create(args.name, parent_id=args.parent_id, parent_type=args.parent_type)
    item_output(args, doc, [("ID", doc.id), ("Name", doc.name)])


# =============================================================================
# Main CLI
# =============================================================================


def _group(subparsers: Any, name: str, help_text: str) -> Any:
    """Add a command group whose bare invocation prints its help."""
    group = subparsers.add_parser(name, help=help_text)
    group.set_defaults(func=_print_help(group))
    return group.add_subparsers(dest="subcommand")


def _add_cursor_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--cursor", help="Cursor from a previous page")
    parser.add_argument("--limit", type=int, help="Page size")


def _add_force(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--force", "-f", action="store_true", help="Skip the confirmation check")


def create_parser() -> argparse.ArgumentParser:  # noqa: PLR0915
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="clickup",
        description="ClickUp CLI - Project management from the command line",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Output Modes:
  default:  Aligned tables and key/value lines
  --plain:  Tab-separated values with a header row
  --json:   Indented JSON (also CLICKUP_CLI_JSON=1)

Examples:
  clickup auth set-key --stdin < token.txt
  clickup auth set-team 9012345
  clickup tasks list <list_id> --status "in progress"
  clickup tasks create <list_id> "Write release notes" --priority high
  clickup --json tasks search --tag bug | jq '.[].id'
  clickup attachments upload <task_id> ./report.pdf
""",
    )
    parser.add_argument("--version", action="version", version=f"clickup-cli {__version__}")
    parser.add_argument("--json", action="store_true", help="Output JSON to stdout (best for scripting)")
    parser.add_argument("--plain", action="store_true", help="Output tab-separated values (no alignment)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging on stderr")
    parser.add_argument("--workspace", "-w", help="Workspace ID for v3 calls (overrides CLICKUP_WORKSPACE_ID)")
    parser.add_argument("--team", "-t", help="Team ID (overrides CLICKUP_TEAM_ID)")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # ========== Auth ==========
    auth_sub = _group(subparsers, "auth", "Auth and credentials")

    a_set_key = auth_sub.add_parser("set-key", help="Store the API key")
    a_set_key.add_argument("key", nargs="?", help="API key (discouraged; exposes it in shell history)")
    a_set_key.add_argument("--stdin", action="store_true", help="Read the API key from stdin")
    a_set_key.set_defaults(func=cmd_auth_set_key)

    a_status = auth_sub.add_parser("status", help="Show authentication status")
    a_status.set_defaults(func=cmd_auth_status)

    a_remove = auth_sub.add_parser("remove", help="Remove the stored API key")
    a_remove.set_defaults(func=cmd_auth_remove)

    a_set_team = auth_sub.add_parser("set-team", help="Store the default team ID")
    a_set_team.add_argument("team_id", help="Team (workspace) ID")
    a_set_team.add_argument(
        "--workspace-too", action="store_true", help="Also use this ID as the workspace ID for v3 calls"
    )
    a_set_team.set_defaults(func=cmd_auth_set_team)

    a_set_ws = auth_sub.add_parser("set-workspace", help="Store the workspace ID for v3 calls")
    a_set_ws.add_argument("workspace_id", help="Workspace ID")
    a_set_ws.set_defaults(func=cmd_auth_set_workspace)

    a_whoami = auth_sub.add_parser("whoami", help="Show the authorized user")
    a_whoami.set_defaults(func=cmd_auth_whoami)

    a_token = auth_sub.add_parser("token", help="Exchange an OAuth code for an access token")
    a_token.add_argument("--client-id", required=True, help="OAuth app client ID")
    a_token.add_argument("--client-secret", required=True, help="OAuth app client secret")
    a_token.add_argument("--code", required=True, help="Authorization code")
    a_token.set_defaults(func=cmd_auth_token)

    # ========== Version ==========
    version = subparsers.add_parser("version", help="Print version")
    version.set_defaults(func=cmd_version)

    # ========== Workspaces ==========
    ws_sub = _group(subparsers, "workspaces", "Workspace operations")

    ws_list = ws_sub.add_parser("list", help="List workspaces")
    ws_list.set_defaults(func=cmd_workspaces_list)

    ws_plan = ws_sub.add_parser("plan", help="Show the workspace plan")
    ws_plan.add_argument("team_id", nargs="?", help="Team ID (default: configured team)")
    ws_plan.set_defaults(func=cmd_workspaces_plan)

    ws_seats = ws_sub.add_parser("seats", help="Show seat usage")
    ws_seats.add_argument("team_id", nargs="?", help="Team ID (default: configured team)")
    ws_seats.set_defaults(func=cmd_workspaces_seats)

    # ========== Spaces ==========
    sp_sub = _group(subparsers, "spaces", "Space operations")

    sp_list = sp_sub.add_parser("list", help="List spaces")
    sp_list.add_argument("--archived", action="store_true", help="List archived spaces")
    sp_list.set_defaults(func=cmd_spaces_list)

    sp_get = sp_sub.add_parser("get", help="Get space details")
    sp_get.add_argument("space_id", help="Space ID")
    sp_get.set_defaults(func=cmd_spaces_get)

    sp_create = sp_sub.add_parser("create", help="Create a space")
    sp_create.add_argument("name", help="Space name")
    sp_create.add_argument("--private", action="store_true", help="Make the space private")
    sp_create.set_defaults(func=cmd_spaces_create)

    sp_update = sp_sub.add_parser("update", help="Update a space")
    sp_update.add_argument("space_id", help="Space ID")
    sp_update.add_argument("--name", help="New name")
    sp_update.add_argument("--private", action=argparse.BooleanOptionalAction, help="Private or public")
    sp_update.set_defaults(func=cmd_spaces_update)

    sp_delete = sp_sub.add_parser("delete", help="Delete a space")
    sp_delete.add_argument("space_id", help="Space ID")
    _add_force(sp_delete)
    sp_delete.set_defaults(func=cmd_spaces_delete)

    # ========== Folders ==========
    fo_sub = _group(subparsers, "folders", "Folder operations")

    fo_list = fo_sub.add_parser("list", help="List folders in a space")
    fo_list.add_argument("space_id", help="Space ID")
    fo_list.add_argument("--archived", action="store_true", help="List archived folders")
    fo_list.set_defaults(func=cmd_folders_list)

    fo_get = fo_sub.add_parser("get", help="Get folder details")
    fo_get.add_argument("folder_id", help="Folder ID")
    fo_get.set_defaults(func=cmd_folders_get)

    fo_create = fo_sub.add_parser("create", help="Create a folder")
    fo_create.add_argument("space_id", help="Space ID")
    fo_create.add_argument("name", help="Folder name")
    fo_create.set_defaults(func=cmd_folders_create)

    fo_update = fo_sub.add_parser("update", help="Rename a folder")
    fo_update.add_argument("folder_id", help="Folder ID")
    fo_update.add_argument("name", help="New name")
    fo_update.set_defaults(func=cmd_folders_update)

    fo_delete = fo_sub.add_parser("delete", help="Delete a folder")
    fo_delete.add_argument("folder_id", help="Folder ID")
    _add_force(fo_delete)
    fo_delete.set_defaults(func=cmd_folders_delete)

    # ========== Lists ==========
    li_sub = _group(subparsers, "lists", "List operations")

    li_list = li_sub.add_parser("list", help="List lists in a folder or space")
    li_list.add_argument("--folder", help="Folder ID")
    li_list.add_argument("--space", help="Space ID (folderless lists)")
    li_list.add_argument("--archived", action="store_true", help="List archived lists")
    li_list.set_defaults(func=cmd_lists_list)

    li_get = li_sub.add_parser("get", help="Get list details")
    li_get.add_argument("list_id", help="List ID")
    li_get.set_defaults(func=cmd_lists_get)

    li_create = li_sub.add_parser("create", help="Create a list")
    li_create.add_argument("name", help="List name")
    li_create.add_argument("--folder", help="Folder ID")
    li_create.add_argument("--space", help="Space ID (folderless list)")
    li_create.add_argument("--content", help="List description")
    li_create.set_defaults(func=cmd_lists_create)

    li_update = li_sub.add_parser("update", help="Update a list")
    li_update.add_argument("list_id", help="List ID")
    li_update.add_argument("--name", help="New name")
    li_update.add_argument("--content", help="New description")
    li_update.set_defaults(func=cmd_lists_update)

    li_delete = li_sub.add_parser("delete", help="Delete a list")
    li_delete.add_argument("list_id", help="List ID")
    _add_force(li_delete)
    li_delete.set_defaults(func=cmd_lists_delete)

    li_add = li_sub.add_parser("add-task", help="Add a task to an additional list")
    li_add.add_argument("list_id", help="List ID")
    li_add.add_argument("task_id", help="Task ID")
    li_add.set_defaults(func=cmd_lists_add_task)

    li_remove = li_sub.add_parser("remove-task", help="Remove a task from an additional list")
    li_remove.add_argument("list_id", help="List ID")
    li_remove.add_argument("task_id", help="Task ID")
    li_remove.set_defaults(func=cmd_lists_remove_task)

    # ========== Tasks ==========
    ta_sub = _group(subparsers, "tasks", "Task operations")

    ta_list = ta_sub.add_parser("list", help="List tasks in a list")
    ta_list.add_argument("list_id", help="List ID")
    ta_list.add_argument("--status", help="Only tasks in this status")
    ta_list.add_argument("--assignee", help="Only tasks assigned to this user ID")
    ta_list.add_argument("--page", type=int, help="Page number (from 0)")
    ta_list.set_defaults(func=cmd_tasks_list)

    ta_get = ta_sub.add_parser("get", help="Get task details")
    ta_get.add_argument("task_id", help="Task ID")
    ta_get.set_defaults(func=cmd_tasks_get)

    ta_create = ta_sub.add_parser("create", help="Create a task")
    ta_create.add_argument("list_id", help="List ID")
    ta_create.add_argument("name", help="Task name")
    ta_create.add_argument("--description", "-d", help="Task description")
    ta_create.add_argument("--priority", "-p", type=parse_priority, help="1-4 or urgent/high/normal/low")
    ta_create.add_argument("--assignee", "-a", type=int, action="append", help="Assignee user ID (repeatable)")
    ta_create.add_argument("--due", type=parse_ms, help="Due date ('now', Unix ms, or ISO date)")
    ta_create.add_argument("--status", help="Initial status")
    ta_create.set_defaults(func=cmd_tasks_create)

    ta_update = ta_sub.add_parser("update", help="Update a task")
    ta_update.add_argument("task_id", help="Task ID")
    ta_update.add_argument("--name", help="New name")
    ta_update.add_argument("--description", "-d", help="New description")
    ta_update.add_argument("--status", help="New status")
    ta_update.add_argument("--priority", "-p", type=parse_priority, help="1-4 or urgent/high/normal/low")
    ta_update.add_argument("--due", type=parse_ms, help="Due date ('now', Unix ms, or ISO date)")
    ta_update.set_defaults(func=cmd_tasks_update)

    ta_delete = ta_sub.add_parser("delete", help="Delete a task")
    ta_delete.add_argument("task_id", help="Task ID")
    _add_force(ta_delete)
    ta_delete.set_defaults(func=cmd_tasks_delete)

    ta_search = ta_sub.add_parser("search", help="Search tasks across the team")
    ta_search.add_argument("--status", action="append", help="Status filter (repeatable)")
    ta_search.add_argument("--assignee", type=int, action="append", help="Assignee user ID (repeatable)")
    ta_search.add_argument("--tag", action="append", help="Tag filter (repeatable)")
    ta_search.add_argument("--include-closed", action="store_true", help="Include closed tasks")
    ta_search.add_argument("--page", type=int, help="Page number (from 0)")
    ta_search.set_defaults(func=cmd_tasks_search)

    ta_tis = ta_sub.add_parser("time-in-status", help="Time spent in each status")
    ta_tis.add_argument("task_id", help="Task ID")
    ta_tis.set_defaults(func=cmd_tasks_time_in_status)

    ta_merge = ta_sub.add_parser("merge", help="Merge tasks into a target task")
    ta_merge.add_argument("target_id", help="Task that remains")
    ta_merge.add_argument("source_ids", nargs="+", help="Tasks merged into the target")
    ta_merge.set_defaults(func=cmd_tasks_merge)

    ta_move = ta_sub.add_parser("move", help="Move a task to another list")
    ta_move.add_argument("task_id", help="Task ID")
    ta_move.add_argument("list_id", help="Destination list ID")
    ta_move.set_defaults(func=cmd_tasks_move)

    ta_bulk = ta_sub.add_parser("bulk-time-in-status", help="Time in status for several tasks")
    ta_bulk.add_argument("task_ids", nargs="+", help="Task IDs")
    ta_bulk.set_defaults(func=cmd_tasks_bulk_time_in_status)

    ta_tpl = ta_sub.add_parser("from-template", help="Create a task from a template")
    ta_tpl.add_argument("list_id", help="List ID")
    ta_tpl.add_argument("template_id", help="Task template ID")
    ta_tpl.add_argument("--name", help="Override the template's task name")
    ta_tpl.set_defaults(func=cmd_tasks_from_template)

    # ========== Comments ==========
    co_sub = _group(subparsers, "comments", "Comment operations")

    co_list = co_sub.add_parser("list", help="List comments on a task")
    co_list.add_argument("task_id", help="Task ID")
    co_list.set_defaults(func=cmd_comments_list)

    co_add = co_sub.add_parser("add", help="Comment on a task")
    co_add.add_argument("task_id", help="Task ID")
    co_add.add_argument("text", help="Comment text")
    co_add.add_argument("--notify-all", action="store_true", help="Notify everyone on the task")
    co_add.set_defaults(func=cmd_comments_add)

    co_update = co_sub.add_parser("update", help="Edit a comment")
    co_update.add_argument("comment_id", help="Comment ID")
    co_update.add_argument("text", help="New text")
    co_update.add_argument("--resolved", action=argparse.BooleanOptionalAction, help="Mark resolved or unresolved")
    co_update.set_defaults(func=cmd_comments_update)

    co_delete = co_sub.add_parser("delete", help="Delete a comment")
    co_delete.add_argument("comment_id", help="Comment ID")
    _add_force(co_delete)
    co_delete.set_defaults(func=cmd_comments_delete)

    co_replies = co_sub.add_parser("replies", help="List replies to a comment")
    co_replies.add_argument("comment_id", help="Comment ID")
    co_replies.set_defaults(func=cmd_comments_replies)

    co_reply = co_sub.add_parser("reply", help="Reply to a comment")
    co_reply.add_argument("comment_id", help="Comment ID")
    co_reply.add_argument("text", help="Reply text")
    co_reply.set_defaults(func=cmd_comments_reply)

    # ========== Time ==========
    ti_sub = _group(subparsers, "time", "Time tracking")

    ti_list = ti_sub.add_parser("list", help="List time entries")
    ti_list.add_argument("--task", help="Only entries for this task")
    ti_list.add_argument("--start", type=parse_ms, help="Range start ('now', Unix ms, or ISO date)")
    ti_list.add_argument("--end", type=parse_ms, help="Range end ('now', Unix ms, or ISO date)")
    ti_list.set_defaults(func=cmd_time_list)

    ti_log = ti_sub.add_parser("log", help="Log time against a task")
    ti_log.add_argument("task_id", help="Task ID")
    ti_log.add_argument("duration_ms", type=int, help="Duration in milliseconds")
    ti_log.add_argument("--start", type=parse_ms, default="now", help="Start time (default: now)")
    ti_log.add_argument("--description", help="What the time was spent on")
    ti_log.add_argument("--billable", action="store_true", help="Mark as billable")
    ti_log.set_defaults(func=cmd_time_log)

    ti_get = ti_sub.add_parser("get", help="Get a time entry")
    ti_get.add_argument("entry_id", help="Time entry ID")
    ti_get.set_defaults(func=cmd_time_get)

    ti_current = ti_sub.add_parser("current", help="Show the running timer")
    ti_current.set_defaults(func=cmd_time_current)

    ti_start = ti_sub.add_parser("start", help="Start a timer")
    ti_start.add_argument("task_id", nargs="?", help="Task ID")
    ti_start.add_argument("--description", help="What you are working on")
    ti_start.set_defaults(func=cmd_time_start)

    ti_stop = ti_sub.add_parser("stop", help="Stop the running timer")
    ti_stop.set_defaults(func=cmd_time_stop)

    ti_delete = ti_sub.add_parser("delete", help="Delete a time entry")
    ti_delete.add_argument("entry_id", help="Time entry ID")
    _add_force(ti_delete)
    ti_delete.set_defaults(func=cmd_time_delete)

    ti_update = ti_sub.add_parser("update", help="Update a time entry")
    ti_update.add_argument("entry_id", help="Time entry ID")
    ti_update.add_argument("--description", help="New description")
    ti_update.add_argument("--duration", type=int, help="Duration in milliseconds")
    ti_update.add_argument("--start", type=parse_ms, help="Start time ('now', Unix ms, or ISO date)")
    ti_update.add_argument("--end", type=parse_ms, help="End time ('now', Unix ms, or ISO date)")
    ti_update.add_argument("--billable", action=argparse.BooleanOptionalAction, help="Billable or not")
    ti_update.add_argument("--tags", type=_split_names, help="Comma-separated tag names")
    ti_update.add_argument("--tag-action", choices=("add", "remove"), help="What to do with --tags")
    ti_update.set_defaults(func=cmd_time_update)

    ti_history = ti_sub.add_parser("history", help="Show a time entry's change history")
    ti_history.add_argument("entry_id", help="Time entry ID")
    ti_history.set_defaults(func=cmd_time_history)

    ti_tags = ti_sub.add_parser("tags", help="List tags used on time entries")
    ti_tags.set_defaults(func=cmd_time_tags)

    for name, handler, help_text in (
        ("add-tags", cmd_time_add_tags, "Add tags to time entries"),
        ("remove-tags", cmd_time_remove_tags, "Remove tags from time entries"),
    ):
        ti_tagging = ti_sub.add_parser(name, help=help_text)
        ti_tagging.add_argument("--entry-ids", type=_split_names, required=True, help="Comma-separated entry IDs")
        ti_tagging.add_argument("--tags", type=_split_names, required=True, help="Comma-separated tag names")
        ti_tagging.set_defaults(func=handler)

    ti_rename = ti_sub.add_parser("rename-tag", help="Rename a time entry tag")
    ti_rename.add_argument("--old-name", required=True, help="Current tag name")
    ti_rename.add_argument("--new-name", required=True, help="New tag name")
    ti_rename.set_defaults(func=cmd_time_rename_tag)

    # ========== Attachments ==========
    at_sub = _group(subparsers, "attachments", "File attachments")

    at_upload = at_sub.add_parser("upload", help="Upload a file to a task")
    at_upload.add_argument("task_id", help="Task ID")
    at_upload.add_argument("file", help="Path to the file")
    at_upload.add_argument("--name", help="File name shown in ClickUp (default: the file's name)")
    at_upload.set_defaults(func=cmd_attachments_upload)

    at_list = at_sub.add_parser("list", help="List attachments")
    at_list.add_argument("parent_type", choices=ATTACHMENT_PARENT_TYPES, help="Parent type")
    at_list.add_argument("parent_id", help="Parent ID")
    at_list.set_defaults(func=cmd_attachments_list)

    at_create = at_sub.add_parser("create", help="Upload a file to any parent")
    at_create.add_argument("parent_type", choices=ATTACHMENT_PARENT_TYPES, help="Parent type")
    at_create.add_argument("parent_id", help="Parent ID")
    at_create.add_argument("file", help="Path to the file")
    at_create.add_argument("--name", help="File name shown in ClickUp (default: the file's name)")
    at_create.set_defaults(func=cmd_attachments_create)

    # ========== Webhooks ==========
    wh_sub = _group(subparsers, "webhooks", "Webhook operations")

    wh_list = wh_sub.add_parser("list", help="List webhooks")
    wh_list.set_defaults(func=cmd_webhooks_list)

    wh_create = wh_sub.add_parser("create", help="Create a webhook")
    wh_create.add_argument("endpoint", help="URL that receives events")
    wh_create.add_argument("--event", "-e", action="append", help="Event name, or * for all (repeatable)")
    wh_create.add_argument("--space", help="Only events in this space")
    wh_create.add_argument("--list", help="Only events in this list")
    wh_create.add_argument("--task", help="Only events for this task")
    wh_create.set_defaults(func=cmd_webhooks_create)

    wh_update = wh_sub.add_parser("update", help="Update a webhook")
    wh_update.add_argument("webhook_id", help="Webhook ID")
    wh_update.add_argument("--endpoint", help="New endpoint URL")
    wh_update.add_argument("--event", "-e", action="append", help="Event name (repeatable)")
    wh_update.add_argument("--status", choices=("active", "inactive"), help="Webhook status")
    wh_update.set_defaults(func=cmd_webhooks_update)

    wh_delete = wh_sub.add_parser("delete", help="Delete a webhook")
    wh_delete.add_argument("webhook_id", help="Webhook ID")
    _add_force(wh_delete)
    wh_delete.set_defaults(func=cmd_webhooks_delete)

    # ========== Goals ==========
    go_sub = _group(subparsers, "goals", "Goal operations")

    go_list = go_sub.add_parser("list", help="List goals")
    go_list.add_argument("--include-completed", action="store_true", help="Include completed goals")
    go_list.set_defaults(func=cmd_goals_list)

    go_get = go_sub.add_parser("get", help="Get goal details")
    go_get.add_argument("goal_id", help="Goal ID")
    go_get.set_defaults(func=cmd_goals_get)

    go_create = go_sub.add_parser("create", help="Create a goal")
    go_create.add_argument("name", help="Goal name")
    go_create.add_argument("--due", type=parse_ms, help="Due date ('now', Unix ms, or ISO date)")
    go_create.add_argument("--description", help="Goal description")
    go_create.set_defaults(func=cmd_goals_create)

    go_update = go_sub.add_parser("update", help="Update a goal")
    go_update.add_argument("goal_id", help="Goal ID")
    go_update.add_argument("--name", help="New name")
    go_update.add_argument("--description", help="New description")
    go_update.add_argument("--due", type=parse_ms, help="Due date ('now', Unix ms, or ISO date)")
    go_update.set_defaults(func=cmd_goals_update)

    go_delete = go_sub.add_parser("delete", help="Delete a goal")
    go_delete.add_argument("goal_id", help="Goal ID")
    _add_force(go_delete)
    go_delete.set_defaults(func=cmd_goals_delete)

    # ========== Members ==========
    me_sub = _group(subparsers, "members", "Member operations")

    me_list = me_sub.add_parser("list", help="List team members, or members of a list or task")
    me_list.add_argument("--list", help="List ID")
    me_list.add_argument("--task", help="Task ID")
    me_list.set_defaults(func=cmd_members_list)

    # ========== Groups ==========
    gr_sub = _group(subparsers, "groups", "User group operations")

    gr_list = gr_sub.add_parser("list", help="List user groups")
    gr_list.set_defaults(func=cmd_groups_list)

    gr_create = gr_sub.add_parser("create", help="Create a user group")
    gr_create.add_argument("name", help="Group name")
    gr_create.add_argument("--members", type=_parse_user_ids, help="Comma-separated user IDs")
    gr_create.set_defaults(func=cmd_groups_create)

    gr_update = gr_sub.add_parser("update", help="Update a user group")
    gr_update.add_argument("group_id", help="Group ID")
    gr_update.add_argument("--name", help="New name")
    gr_update.add_argument("--add-members", type=_parse_user_ids, help="Comma-separated user IDs to add")
    gr_update.add_argument("--remove-members", type=_parse_user_ids, help="Comma-separated user IDs to remove")
    gr_update.set_defaults(func=cmd_groups_update)

    gr_delete = gr_sub.add_parser("delete", help="Delete a user group")
    gr_delete.add_argument("group_id", help="Group ID")
    _add_force(gr_delete)
    gr_delete.set_defaults(func=cmd_groups_delete)

    # ========== Roles ==========
    ro_sub = _group(subparsers, "roles", "Custom roles")

    ro_list = ro_sub.add_parser("list", help="List custom roles")
    ro_list.set_defaults(func=cmd_roles_list)

    # ========== Tags ==========
    tg_sub = _group(subparsers, "tags", "Tag operations")

    tg_list = tg_sub.add_parser("list", help="List tags in a space")
    tg_list.add_argument("space_id", help="Space ID")
    tg_list.set_defaults(func=cmd_tags_list)

    tg_add = tg_sub.add_parser("add", help="Add a tag to a task")
    tg_add.add_argument("task_id", help="Task ID")
    tg_add.add_argument("tag", help="Tag name")
    tg_add.set_defaults(func=cmd_tags_add)

    tg_remove = tg_sub.add_parser("remove", help="Remove a tag from a task")
    tg_remove.add_argument("task_id", help="Task ID")
    tg_remove.add_argument("tag", help="Tag name")
    tg_remove.set_defaults(func=cmd_tags_remove)

    # ========== Chat ==========
    ch_sub = _group(subparsers, "chat", "Chat channels and messages (needs --workspace)")

    ch_channels = ch_sub.add_parser("channels", help="List channels")
    _add_cursor_args(ch_channels)
    ch_channels.set_defaults(func=cmd_chat_channels)

    ch_channel = ch_sub.add_parser("channel", help="Get channel details")
    ch_channel.add_argument("channel_id", help="Channel ID")
    ch_channel.set_defaults(func=cmd_chat_channel)

    ch_messages = ch_sub.add_parser("messages", help="List messages in a channel")
    ch_messages.add_argument("channel_id", help="Channel ID")
    _add_cursor_args(ch_messages)
    ch_messages.set_defaults(func=cmd_chat_messages)

    ch_send = ch_sub.add_parser("send", help="Send a message")
    ch_send.add_argument("channel_id", help="Channel ID")
    ch_send.add_argument("content", help="Message text (markdown)")
    ch_send.set_defaults(func=cmd_chat_send)

    ch_delete = ch_sub.add_parser("delete-message", help="Delete a message")
    ch_delete.add_argument("message_id", help="Message ID")
    _add_force(ch_delete)
    ch_delete.set_defaults(func=cmd_chat_delete)

    # ========== Docs ==========
    do_sub = _group(subparsers, "docs", "Docs and pages (needs --workspace)")

    do_search = do_sub.add_parser("search", help="List docs")
    _add_cursor_args(do_search)
    do_search.set_defaults(func=cmd_docs_search)

    do_get = do_sub.add_parser("get", help="Get doc details")
    do_get.add_argument("doc_id", help="Doc ID")
    do_get.set_defaults(func=cmd_docs_get)

    do_pages = do_sub.add_parser("pages", help="Show doc pages")
    do_pages.add_argument("doc_id", help="Doc ID")
    do_pages.add_argument("--depth", type=int, help="Max page depth")
    do_pages.set_defaults(func=cmd_docs_pages)

    do_create = do_sub.add_parser("create", help="Create a doc")
    do_create.add_argument("name", help="Doc name")
    do_create.add_argument("--parent-id", help="Parent ID (default: workspace)")
    do_create.add_argument("--parent-type", type=int, help="Parent type (4=space, 5=folder, 6=list, 7=everything)")
    do_create.set_defaults(func=cmd_docs_create)

    return parser


def resolve_mode(args: argparse.Namespace) -> outfmt.Mode:
    """Flags win; without flags, CLICKUP_CLI_JSON / CLICKUP_CLI_PLAIN apply."""
    if args.json or args.plain:
        return outfmt.from_flags(args.json, args.plain)
    env_mode = outfmt.from_env(config.ENV_PREFIX)
    return outfmt.from_flags(env_mode.json, env_mode.plain)


def build_client(args: argparse.Namespace) -> ClickUpClient:
    """Create the SDK client from flags, environment and stored config."""
    api_key = config.resolve_api_key()
    if getattr(args.func, "needs_auth", True) and not api_key:
        raise CLIError("no credentials found; run: clickup auth set-key")
    workspace_id = config.resolve_workspace_id(args.workspace)
    base_url = config.resolve_base_url()
    logger.debug("base URL %s, workspace %s", base_url, workspace_id or "-")
    return ClickUpClient(
        api_key=api_key,
        base_url=base_url,
        workspace_id=workspace_id or None,
        timeout=config.resolve_timeout(),
    )


def error_output(error: CLIError, mode: outfmt.Mode) -> None:
    """Print an error: JSON on stdout in JSON mode, text on stderr otherwise."""
    if mode.json:
        outfmt.write_json(error.to_dict())
        return
    print(f"Error: {error}", file=sys.stderr)
    api_error = unwrap(error, APIError)
    if api_error is not None and api_error.status in (401, 403):
        print(AUTH_HINT, file=sys.stderr)


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point. Returns the process exit code."""
    config.load_env()
    parser = create_parser()
    args = parser.parse_args(argv)
    config.setup_logging(args.verbose)

    if not args.command:
        parser.print_help()
        return 0

    mode = outfmt.Mode()
    try:
        mode = resolve_mode(args)
        args.mode = mode
        client = build_client(args)
        args.func(client, args)
    except CLIError as e:
        logger.debug("command failed", exc_info=True)
        error_output(e, mode)
        return e.exit_code
    except KeyboardInterrupt:
        print("Interrupted", file=sys.stderr)
        return 130
    return 0


if __name__ == "__main__":
    sys.exit(main())
