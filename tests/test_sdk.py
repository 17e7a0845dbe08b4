"""Tests for the high-level ClickUp client."""

import io

import pytest

from clickup_cli.core.client import APIError, OperationError, TransportError, ValidationError, unwrap
from clickup_cli.core.types import CursorPage, Task, TimeEntry
from clickup_cli.sdk import ClickUpClient, with_query

WORKSPACE_ID = "9012345"
TEAM_ID = "9012345"


@pytest.fixture
def clickup(api):
    return ClickUpClient(api_key="pk_test", base_url=api.url, workspace_id=WORKSPACE_ID, timeout=5)


@pytest.fixture
def no_workspace(api):
    return ClickUpClient(api_key="pk_test", base_url=api.url, timeout=5)


def _task(task_id: str = "abc", name: str = "Write docs", **extra) -> dict:
    return {
        "id": task_id,
        "name": name,
        "status": {"status": "in progress"},
        "priority": {"priority": "high"},
        "list": {"id": "901", "name": "Backlog"},
        "assignees": [{"id": 7, "username": "sam"}],
        "tags": [{"name": "bug"}],
        **extra,
    }


class TestWithQuery:
    def test_skips_empty_values(self):
        assert with_query("/x", {"a": None, "b": False, "c": [], "d": ""}) == "/x"

    def test_encodes_bools_and_lists(self):
        path = with_query("/x", {"archived": True, "statuses[]": ["to do", "done"]})
        assert path == "/x?archived=true&statuses%5B%5D=to+do&statuses%5B%5D=done"

    def test_appends_to_existing_query(self):
        assert with_query("/x?a=1", {"b": 2}) == "/x?a=1&b=2"


class TestTasks:
    """Task operations."""

    def test_list(self, clickup, api):
        api.respond("GET", "/v2/list/901/task", {"tasks": [_task("a"), _task("b")]})
        tasks = clickup.tasks.list("901", status="in progress")
        assert [t.id for t in tasks] == ["a", "b"]
        assert tasks[0].status == "in progress"
        assert tasks[0].priority == "high"
        assert tasks[0].home_list.name == "Backlog"
        assert tasks[0].assignees[0].username == "sam"
        assert tasks[0].tags == ["bug"]
        assert api.last.query == {"include_closed": ["true"], "statuses[]": ["in progress"]}

    def test_get(self, clickup, api):
        api.respond("GET", "/v2/task/abc", _task())
        task = clickup.tasks.get("abc")
        assert isinstance(task, Task)
        assert task.name == "Write docs"

    def test_create(self, clickup, api):
        api.respond("POST", "/v2/list/901/task", _task("new", "Ship it"))
        task = clickup.tasks.create("901", "Ship it", priority=2, assignees=[7])
        assert task.id == "new"
        assert api.last.json() == {"name": "Ship it", "priority": 2, "assignees": [7]}

    def test_create_requires_name(self, clickup, api):
        with pytest.raises(ValidationError, match="name is required"):
            clickup.tasks.create("901", "")
        assert api.requests == []

    @pytest.mark.parametrize(
        "call",
        [
            lambda c: c.tasks.get(""),
            lambda c: c.tasks.list(""),
            lambda c: c.tasks.delete(""),
            lambda c: c.tasks.update("", name="x"),
            lambda c: c.tasks.create("", "name"),
            lambda c: c.comments.list(""),
            lambda c: c.lists.add_task("901", ""),
            lambda c: c.spaces.get(""),
            lambda c: c.folders.get(""),
            lambda c: c.goals.delete(""),
            lambda c: c.webhooks.delete(""),
            lambda c: c.tags.add_to_task("", "bug"),
            lambda c: c.time.delete(TEAM_ID, ""),
        ],
    )
    def test_missing_id_fails_before_request(self, clickup, api, call):
        with pytest.raises(ValidationError, match="id is required"):
            call(clickup)
        assert api.requests == []

    def test_update_drops_unset_fields(self, clickup, api):
        api.respond("PUT", "/v2/task/abc", _task(name="Renamed"))
        clickup.tasks.update("abc", name="Renamed", description=None, status="done")
        assert api.last.json() == {"name": "Renamed", "status": "done"}

    def test_delete(self, clickup, api):
        clickup.tasks.delete("abc")
        assert api.last.method == "DELETE"
        assert api.last.path == "/v2/task/abc"

    def test_search(self, clickup, api):
        api.respond("GET", f"/v2/team/{TEAM_ID}/task", {"tasks": [_task()]})
        tasks = clickup.tasks.search(TEAM_ID, statuses=["open"], assignees=[7, 8], include_closed=True)
        assert len(tasks) == 1
        assert api.last.query == {
            "statuses[]": ["open"],
            "include_closed": ["true"],
            "assignees[]": ["7", "8"],
        }

    def test_merge(self, clickup, api):
        clickup.tasks.merge("target", ["s1", "s2"])
        assert api.last.path == "/v2/task/target/merge"
        assert api.last.json() == {"merged_task_ids": ["s1", "s2"]}

    def test_merge_requires_sources(self, clickup, api):
        with pytest.raises(ValidationError):
            clickup.tasks.merge("target", [])
        assert api.requests == []

    def test_move_uses_v3_workspace_path(self, clickup, api):
        clickup.tasks.move("abc", "902")
        assert api.last.method == "PUT"
        assert api.last.path == f"/v3/workspaces/{WORKSPACE_ID}/tasks/abc/home_list/902"


class TestErrorWrapping:
    """Failures carry the operation label and the original error."""

    def test_api_error_is_wrapped(self, clickup, api):
        api.respond("DELETE", "/v2/task/abc", {"error": "forbidden"}, status=403)
        with pytest.raises(OperationError) as exc_info:
            clickup.tasks.delete("abc")
        err = exc_info.value
        assert str(err) == "delete task: API error (403): forbidden"
        api_err = unwrap(err, APIError)
        assert api_err is not None
        assert api_err.status == 403
        assert api_err.message == "forbidden"

    def test_transport_error_is_wrapped(self):
        client = ClickUpClient(api_key="pk_test", base_url="http://127.0.0.1:9", timeout=1)
        with pytest.raises(OperationError) as exc_info:
            client.tasks.get("abc")
        assert unwrap(exc_info.value, TransportError) is not None
        assert exc_info.value.exit_code == 3

    def test_validation_error_is_not_wrapped(self, clickup):
        with pytest.raises(ValidationError):
            clickup.tasks.get("")


class TestV3Workspace:
    """v3 endpoints need a workspace ID."""

    @pytest.mark.parametrize(
        "call",
        [
            lambda c: c.chat.list_channels(),
            lambda c: c.chat.send_message("ch1", "hi"),
            lambda c: c.docs.search(),
            lambda c: c.docs.get("d1"),
            lambda c: c.tasks.move("abc", "902"),
            lambda c: c.attachments.list("task", "abc"),
        ],
    )
    def test_missing_workspace(self, no_workspace, api, call):
        with pytest.raises(ValidationError, match="workspace ID required"):
            call(no_workspace)
        assert api.requests == []

    def test_chat_channels_cursor(self, clickup, api):
        api.respond(
            "GET",
            f"/v3/workspaces/{WORKSPACE_ID}/chat/channels",
            {"data": [{"id": "ch1", "name": "general", "type": "CHANNEL"}], "next_cursor": "c2"},
        )
        page = clickup.chat.list_channels(cursor="c1", limit=10)
        assert isinstance(page, CursorPage)
        assert page.data[0].name == "general"
        assert page.next_cursor == "c2"
        assert page.has_more
        assert api.last.query == {"cursor": ["c1"], "limit": ["10"]}

    def test_chat_last_page(self, clickup, api):
        api.respond("GET", f"/v3/workspaces/{WORKSPACE_ID}/chat/channels/ch1/messages", {"data": []})
        page = clickup.chat.list_messages("ch1")
        assert page.data == []
        assert not page.has_more

    def test_send_message(self, clickup, api):
        api.respond(
            "POST",
            f"/v3/workspaces/{WORKSPACE_ID}/chat/channels/ch1/messages",
            {"id": "m1", "content": "hello", "user_id": 7, "date": 1700000000000},
        )
        message = clickup.chat.send_message("ch1", "hello")
        assert message.id == "m1"
        assert message.user_id == "7"
        assert api.last.json() == {"type": "message", "content": "hello", "content_format": "text/md"}

    def test_doc_create_with_parent(self, clickup, api):
        api.respond("POST", f"/v3/workspaces/{WORKSPACE_ID}/docs", {"id": "d1", "name": "Roadmap"})
        doc = clickup.docs.create("Roadmap", parent_id="sp1")
        assert doc.id == "d1"
        assert api.last.json() == {"name": "Roadmap", "parent": {"id": "sp1", "type": 4}}

    def test_doc_pages(self, clickup, api):
        api.respond(
            "GET",
            f"/v3/workspaces/{WORKSPACE_ID}/docs/d1/pages",
            [{"id": "p1", "name": "Intro", "content": "# Hi", "pages": [{"id": "p2", "name": "Child"}]}],
        )
        pages = clickup.docs.pages("d1")
        assert pages[0].content == "# Hi"
        assert pages[0].pages[0].id == "p2"


class TestAuth:
    def test_whoami(self, clickup, api):
        api.respond("GET", "/v2/user", {"user": {"id": 7, "username": "sam", "email": "sam@example.com"}})
        user = clickup.auth.whoami()
        assert user.id == 7
        assert user.email == "sam@example.com"

    def test_token_is_unauthenticated(self, clickup, api):
        api.respond("POST", "/v2/oauth/token", {"access_token": "tok", "token_type": "Bearer"})
        token = clickup.auth.token("cid", "secret", "code")
        assert token.access_token == "tok"
        assert "Authorization" not in api.last.headers
        assert api.last.json() == {"client_id": "cid", "client_secret": "secret", "code": "code"}

    def test_token_requires_all_fields(self, clickup, api):
        with pytest.raises(ValidationError):
            clickup.auth.token("cid", "", "code")
        assert api.requests == []


class TestHierarchy:
    def test_spaces_list(self, clickup, api):
        api.respond(
            "GET",
            f"/v2/team/{TEAM_ID}/space",
            {"spaces": [{"id": 1, "name": "Eng", "private": True, "statuses": [{"status": "open"}]}]},
        )
        spaces = clickup.spaces.list(TEAM_ID, archived=True)
        assert spaces[0].id == "1"
        assert spaces[0].statuses == ["open"]
        assert api.last.query == {"archived": ["true"]}

    def test_folderless_lists(self, clickup, api):
        api.respond("GET", "/v2/space/1/list", {"lists": [{"id": "901", "name": "Backlog", "task_count": "12"}]})
        lists = clickup.lists.list_folderless("1")
        assert lists[0].task_count == 12

    def test_create_list_in_folder(self, clickup, api):
        api.respond("POST", "/v2/folder/5/list", {"id": "903", "name": "Sprint 4"})
        lst = clickup.lists.create_in_folder("5", "Sprint 4")
        assert lst.name == "Sprint 4"
        assert api.last.json() == {"name": "Sprint 4"}

    def test_workspaces_list(self, clickup, api):
        api.respond("GET", "/v2/team", {"teams": [{"id": 9012345, "name": "Acme", "members": [{"user": {"id": 1}}]}]})
        workspaces = clickup.workspaces.list()
        assert workspaces[0].id == "9012345"
        assert workspaces[0].members[0].id == 1

    def test_members_needs_exactly_one_parent(self, clickup, api):
        with pytest.raises(ValidationError):
            clickup.members.list()
        with pytest.raises(ValidationError):
            clickup.members.list(list_id="1", task_id="2")
        assert api.requests == []

    def test_members_of_task(self, clickup, api):
        api.respond("GET", "/v2/task/abc/member", {"members": [{"id": 7, "username": "sam"}]})
        assert clickup.members.list(task_id="abc")[0].username == "sam"

    def test_tag_name_is_quoted(self, clickup, api):
        clickup.tags.add_to_task("abc", "needs review")
        assert api.last.target == "/v2/task/abc/tag/needs%20review"


class TestCommentsAndTime:
    def test_add_comment(self, clickup, api):
        api.respond("POST", "/v2/task/abc/comment", {"id": 458, "hist_id": "x", "date": 1700000000000})
        comment = clickup.comments.add("abc", "Looks good")
        assert comment.id == "458"
        assert comment.text == "Looks good"
        assert api.last.json() == {"comment_text": "Looks good", "notify_all": False}

    def test_comment_text_required(self, clickup, api):
        with pytest.raises(ValidationError):
            clickup.comments.add("abc", "")
        assert api.requests == []

    def test_log_time(self, clickup, api):
        api.respond(
            "POST",
            f"/v2/team/{TEAM_ID}/time_entries",
            {"data": {"id": "te1", "duration": "3600000", "start": "1700000000000", "task": {"id": "abc"}}},
        )
        entry = clickup.time.log(TEAM_ID, "abc", 3600000, 1700000000000)
        assert isinstance(entry, TimeEntry)
        assert entry.duration == 3600000
        assert entry.task.id == "abc"
        assert api.last.json() == {"tid": "abc", "duration": 3600000, "start": 1700000000000, "billable": False}

    def test_log_time_rejects_zero_duration(self, clickup, api):
        with pytest.raises(ValidationError):
            clickup.time.log(TEAM_ID, "abc", 0, 1700000000000)
        assert api.requests == []

    def test_current_none_when_idle(self, clickup, api):
        api.respond("GET", f"/v2/team/{TEAM_ID}/time_entries/current", {"data": None})
        assert clickup.time.current(TEAM_ID) is None

    def test_current_running(self, clickup, api):
        api.respond("GET", f"/v2/team/{TEAM_ID}/time_entries/current", {"data": {"id": "te2", "duration": -1}})
        entry = clickup.time.current(TEAM_ID)
        assert entry.is_running

    def test_get_entry_unwraps_list(self, clickup, api):
        api.respond("GET", f"/v2/team/{TEAM_ID}/time_entries/te1", {"data": [{"id": "te1", "duration": 60000}]})
        assert clickup.time.get(TEAM_ID, "te1").duration == 60000


class TestAttachmentsAndWebhooks:
    def test_upload(self, clickup, api):
        api.respond("POST", "/v2/task/abc/attachment", {"id": "att1", "title": "notes.txt", "url": "https://x/y"})
        attachment = clickup.attachments.upload("abc", io.BytesIO(b"test file content"), "notes.txt")
        assert attachment.id == "att1"
        assert b'name="attachment"; filename="notes.txt"' in api.last.body

    def test_v3_attachment_parent_type(self, clickup, api):
        with pytest.raises(ValidationError, match="invalid parent type"):
            clickup.attachments.list("doc", "d1")
        assert api.requests == []

    def test_v3_create_attachment(self, clickup, api):
        clickup.attachments.create("list", "901", io.BytesIO(b"abc"), "a.txt")
        assert api.last.path == f"/v3/workspaces/{WORKSPACE_ID}/list/901/attachments"

    def test_webhook_requires_event(self, clickup, api):
        with pytest.raises(ValidationError, match="at least one event"):
            clickup.webhooks.create(TEAM_ID, "https://example.com/hook", [])
        assert api.requests == []

    def test_webhook_create(self, clickup, api):
        api.respond(
            "POST",
            f"/v2/team/{TEAM_ID}/webhook",
            {
                "id": "wh1",
                "webhook": {
                    "id": "wh1",
                    "endpoint": "https://example.com/hook",
                    "events": ["taskCreated"],
                    "health": {"status": "active"},
                    "secret": "s3cr3t",
                },
            },
        )
        webhook = clickup.webhooks.create(TEAM_ID, "https://example.com/hook", ["taskCreated"], list_id="901")
        assert webhook.status == "active"
        assert webhook.secret == "s3cr3t"
        assert api.last.json() == {
            "endpoint": "https://example.com/hook",
            "events": ["taskCreated"],
            "list_id": "901",
        }


class TestTaskExtras:
    def test_bulk_time_in_status_repeats_task_ids(self, clickup, api):
        payload = {
            "a": {"current_status": {"status": "open", "total_time": {"by_minute": 5}}, "status_history": []},
            "b": {"current_status": None, "status_history": [{"status": "done", "total_time": {"by_minute": 9}}]},
        }
        api.respond("GET", "/v2/task/bulk_time_in_status/task_ids", payload)
        result = clickup.tasks.bulk_time_in_status(["a", "b"])
        assert result["b"]["status_history"][0]["status"] == "done"
        assert api.last.query == {"task_ids": ["a", "b"]}

    def test_bulk_time_in_status_needs_ids(self, clickup, api):
        with pytest.raises(ValidationError, match="at least one task ID"):
            clickup.tasks.bulk_time_in_status([])
        assert api.requests == []

    def test_create_from_template(self, clickup, api):
        api.respond("POST", "/v2/list/901/taskTemplate/t-55", _task("new", "Weekly review"))
        task = clickup.tasks.create_from_template("901", "t-55", name="Weekly review")
        assert task.id == "new"
        assert api.last.json() == {"name": "Weekly review"}

    def test_create_from_template_keeps_template_name(self, clickup, api):
        api.respond("POST", "/v2/list/901/taskTemplate/t-55", _task("new"))
        clickup.tasks.create_from_template("901", "t-55")
        assert api.last.json() == {}


class TestTimeExtras:
    def test_update(self, clickup, api):
        api.respond("PUT", f"/v2/team/{TEAM_ID}/time_entries/te1", {"data": {"id": "te1", "duration": 120000}})
        entry = clickup.time.update(
            TEAM_ID, "te1", description="Review", duration_ms=120000, tags=["qa"], tag_action="add"
        )
        assert entry.duration == 120000
        assert api.last.json() == {
            "description": "Review",
            "duration": 120000,
            "tags": [{"name": "qa"}],
            "tag_action": "add",
        }

    def test_update_rejects_unknown_tag_action(self, clickup, api):
        with pytest.raises(ValidationError, match="tag action"):
            clickup.time.update(TEAM_ID, "te1", tags=["qa"], tag_action="replace")
        assert api.requests == []

    def test_history(self, clickup, api):
        api.respond(
            "GET",
            f"/v2/team/{TEAM_ID}/time_entries/te1/history",
            {"data": [{"id": "h1", "field": "duration", "before": 60000, "after": 120000, "user": {"id": 7}}]},
        )
        changes = clickup.time.history(TEAM_ID, "te1")
        assert changes[0].field == "duration"
        assert changes[0].before == "60000"
        assert changes[0].user.id == 7

    def test_tags(self, clickup, api):
        api.respond("GET", f"/v2/team/{TEAM_ID}/time_entries/tags", {"data": [{"name": "qa"}, {"name": "dev"}]})
        assert [t.name for t in clickup.time.tags(TEAM_ID)] == ["qa", "dev"]

    def test_add_tags(self, clickup, api):
        clickup.time.add_tags(TEAM_ID, ["te1", "te2"], ["qa"])
        assert api.last.method == "POST"
        assert api.last.path == f"/v2/team/{TEAM_ID}/time_entries/tags"
        assert api.last.json() == {"time_entry_ids": ["te1", "te2"], "tags": [{"name": "qa"}]}

    def test_remove_tags_sends_body_with_delete(self, clickup, api):
        clickup.time.remove_tags(TEAM_ID, ["te1"], ["qa", "dev"])
        assert api.last.method == "DELETE"
        assert api.last.json() == {"time_entry_ids": ["te1"], "tags": [{"name": "qa"}, {"name": "dev"}]}

    def test_tagging_needs_entries_and_tags(self, clickup, api):
        with pytest.raises(ValidationError, match="time entry IDs and tags"):
            clickup.time.add_tags(TEAM_ID, [], ["qa"])
        with pytest.raises(ValidationError, match="time entry IDs and tags"):
            clickup.time.remove_tags(TEAM_ID, ["te1"], [])
        assert api.requests == []

    def test_rename_tag(self, clickup, api):
        clickup.time.rename_tag(TEAM_ID, "qa", "testing")
        assert api.last.method == "PUT"
        assert api.last.json() == {"name": "qa", "new_name": "testing"}

    def test_rename_tag_needs_both_names(self, clickup, api):
        with pytest.raises(ValidationError, match="name is required"):
            clickup.time.rename_tag(TEAM_ID, "qa", "")
        assert api.requests == []


class TestGroupsRolesAndMembers:
    def test_team_members(self, clickup, api):
        api.respond(
            "GET",
            f"/v2/team/{TEAM_ID}",
            {"team": {"id": TEAM_ID, "name": "Acme", "members": [{"user": {"id": 7, "username": "sam"}}]}},
        )
        members = clickup.members.list_for_team(TEAM_ID)
        assert [(m.id, m.username) for m in members] == [(7, "sam")]

    def test_team_members_needs_team(self, clickup, api):
        with pytest.raises(ValidationError):
            clickup.members.list_for_team("")
        assert api.requests == []

    def test_list_groups(self, clickup, api):
        api.respond(
            "GET",
            "/v2/group",
            {"groups": [{"id": "g1", "name": "Design", "members": [{"id": 7, "username": "sam"}]}]},
        )
        groups = clickup.groups.list()
        assert groups[0].name == "Design"
        assert groups[0].members[0].username == "sam"

    def test_create_group(self, clickup, api):
        api.respond("POST", f"/v2/team/{TEAM_ID}/group", {"id": "g2", "name": "QA", "members": []})
        group = clickup.groups.create(TEAM_ID, "QA", member_ids=[7, 8])
        assert group.id == "g2"
        assert api.last.json() == {"name": "QA", "members": [7, 8]}

    def test_create_group_needs_name(self, clickup, api):
        with pytest.raises(ValidationError, match="name is required"):
            clickup.groups.create(TEAM_ID, "")
        assert api.requests == []

    def test_update_group_members(self, clickup, api):
        api.respond("PUT", "/v2/group/g1", {"id": "g1", "name": "Design"})
        clickup.groups.update("g1", add_members=[9])
        assert api.last.json() == {"members": {"add": [9], "rem": []}}

    def test_update_group_name_only(self, clickup, api):
        api.respond("PUT", "/v2/group/g1", {"id": "g1", "name": "Brand"})
        assert clickup.groups.update("g1", name="Brand").name == "Brand"
        assert api.last.json() == {"name": "Brand"}

    def test_delete_group(self, clickup, api):
        clickup.groups.delete("g1")
        assert (api.last.method, api.last.path) == ("DELETE", "/v2/group/g1")

    def test_list_roles(self, clickup, api):
        api.respond(
            "GET",
            f"/v2/team/{TEAM_ID}/customroles",
            {"custom_roles": [{"id": 3, "name": "Auditor", "permissions": ["view", "comment"]}]},
        )
        roles = clickup.roles.list(TEAM_ID)
        assert roles[0].id == 3
        assert roles[0].permissions == ["view", "comment"]
