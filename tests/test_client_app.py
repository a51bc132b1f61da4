import asyncio
import json

import httpx
import pytest

from tasks_client.api import ApiError, TasksClient
from tasks_client.app import TodoApp
from tasks_client.state import ClientState, Task

BASE = "http://testserver/api/tasks"


def run(coro):
    return asyncio.run(coro)


def task_json(tid, text="Buy milk", completed=False):
    return {"id": tid, "text": text, "completed": completed, "createdAt": "2025-01-01T00:00:00Z"}


class FakeServer:
    """Records requests and answers from a per-method table."""

    def __init__(self):
        self.requests = []
        self.routes = {}

    def __call__(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content) if request.content else None
        self.requests.append((request.method, request.url.path, body))
        answer = self.routes.get(request.method)
        if answer is None:
            return httpx.Response(500, json={"message": "unexpected request"})
        if isinstance(answer, Exception):
            raise answer
        return answer(request) if callable(answer) else answer

    def app(self, state=None):
        client = TasksClient(base_url=BASE, transport=httpx.MockTransport(self))
        return TodoApp(client, state)


@pytest.fixture()
def server():
    return FakeServer()


class TestLoad:
    def test_success(self, server):
        server.routes["GET"] = httpx.Response(200, json=[task_json("2", "b"), task_json("1", "a")])
        app = server.app()
        run(app.load())
        assert [t.id for t in app.state.tasks] == ["2", "1"]
        assert app.state.loading is False
        assert app.state.error is None

    def test_failed_fetch_then_add_still_works(self, server):
        server.routes["GET"] = httpx.ConnectError("connection refused")
        server.routes["POST"] = httpx.Response(201, json=task_json("n1", "Buy milk"))
        app = server.app()

        run(app.load())
        assert app.state.tasks == ()
        assert app.state.loading is False
        assert app.state.error and "Could not load tasks" in app.state.error

        app.set_input("Buy milk")
        run(app.add())
        assert [t.text for t in app.state.tasks] == ["Buy milk"]
        assert app.state.error is None

    def test_server_error_message_is_shown(self, server):
        server.routes["GET"] = httpx.Response(500, json={"message": "store is unreachable"})
        app = server.app()
        run(app.load())
        assert app.state.error == "Could not load tasks. store is unreachable"

    def test_failed_reload_keeps_tasks_on_screen(self, server):
        loaded = ClientState(tasks=(Task("1", "a", False, "t1"),), loading=False)
        server.routes["GET"] = httpx.ConnectError("connection refused")
        app = server.app(loaded)
        run(app.load())
        assert app.state.tasks == loaded.tasks
        assert app.state.loading is False
        assert app.state.error == "Could not load tasks. connection refused"

    def test_wrong_shape_list_is_reported_not_raised(self, server):
        # e.g. --api-url pointing at the server root
        server.routes["GET"] = httpx.Response(200, json={"message": "Healthy", "backend": "sqlite"})
        app = server.app()
        run(app.load())
        assert app.state.tasks == ()
        assert app.state.error == "Could not load tasks. Unexpected response from server"


class TestAdd:
    def test_blank_input_is_ignored(self, server):
        app = server.app(ClientState(loading=False))
        app.set_input("   ")
        run(app.add())
        assert server.requests == []
        assert app.state.new_task_text == "   "

    def test_sends_text_and_completed_false(self, server):
        server.routes["POST"] = httpx.Response(201, json=task_json("srv-id", "Walk dog"))
        app = server.app(ClientState(tasks=(Task("old", "Old", False, "x"),), loading=False))
        app.set_input("Walk dog")
        run(app.add())
        assert server.requests == [("POST", "/api/tasks", {"text": "Walk dog", "completed": False})]
        assert [t.id for t in app.state.tasks] == ["old", "srv-id"]
        assert app.state.new_task_text == ""

    def test_failure_keeps_buffer(self, server):
        server.routes["POST"] = httpx.Response(400, json={"message": "text: Field required"})
        app = server.app(ClientState(loading=False))
        app.set_input("Walk dog")
        run(app.add())
        assert app.state.tasks == ()
        assert app.state.new_task_text == "Walk dog"
        assert "text: Field required" in app.state.error


class TestToggleAndDelete:
    @pytest.fixture()
    def app(self, server):
        state = ClientState(
            tasks=(Task("1", "a", False, "t1"), Task("2", "b", True, "t2")),
            loading=False,
        )
        return server.app(state)

    def test_toggle_sends_flipped_value_and_patches_locally(self, server, app):
        # Server copy deliberately differs; the client only flips its own flag.
        server.routes["PUT"] = httpx.Response(200, json=task_json("2", "renamed elsewhere", True))
        run(app.toggle("2"))
        assert server.requests == [("PUT", "/api/tasks/2", {"completed": False})]
        assert app.state.tasks[1] == Task("2", "b", False, "t2")

    def test_toggle_failure_leaves_state(self, server, app):
        server.routes["PUT"] = httpx.Response(404, json={"message": "Task not found"})
        before = app.state.tasks
        run(app.toggle("1"))
        assert app.state.tasks == before
        assert "Task not found" in app.state.error

    def test_toggle_unknown_local_id_sends_nothing(self, server, app):
        run(app.toggle("nope"))
        assert server.requests == []

    def test_delete_filters_locally(self, server, app):
        server.routes["DELETE"] = httpx.Response(200, json={"message": "Task deleted"})
        run(app.delete("1"))
        assert server.requests == [("DELETE", "/api/tasks/1", None)]
        assert [t.id for t in app.state.tasks] == ["2"]

    def test_delete_failure_keeps_task(self, server, app):
        server.routes["DELETE"] = httpx.ReadError("reset by peer")
        run(app.delete("1"))
        assert [t.id for t in app.state.tasks] == ["1", "2"]
        assert "reset by peer" in app.state.error


def test_listeners_see_every_transition(server):
    server.routes["GET"] = httpx.Response(200, json=[])
    app = server.app()
    seen = []
    app.subscribe(seen.append)
    run(app.load())
    app.set_input("x")
    assert [s.loading for s in seen] == [False, False]
    assert seen[-1].new_task_text == "x"


def test_api_error_without_message_body(server):
    server.routes["GET"] = httpx.Response(502, text="bad gateway")
    client = TasksClient(base_url=BASE, transport=httpx.MockTransport(server))
    with pytest.raises(ApiError) as info:
        run(client.list_tasks())
    assert info.value.status_code == 502
    assert info.value.message == "HTTP 502 Bad Gateway"


@pytest.mark.parametrize(
    "payload",
    [
        {"message": "Healthy", "backend": "sqlite"},
        ["not a task"],
        [{"id": "1", "text": "missing fields"}],
        "plain string",
    ],
)
def test_malformed_task_list_is_api_error(server, payload):
    server.routes["GET"] = httpx.Response(200, json=payload)
    client = TasksClient(base_url=BASE, transport=httpx.MockTransport(server))
    with pytest.raises(ApiError, match="Unexpected response from server"):
        run(client.list_tasks())


def test_malformed_task_on_add_and_toggle_is_reported(server):
    server.routes["POST"] = httpx.Response(201, json={"message": "Healthy"})
    server.routes["PUT"] = httpx.Response(200, json=[])
    app = server.app(ClientState(tasks=(Task("1", "a", False, "t1"),), loading=False))

    app.set_input("Walk dog")
    run(app.add())
    assert app.state.new_task_text == "Walk dog"
    assert app.state.error == "Could not add the task. Unexpected response from server"

    run(app.toggle("1"))
    assert app.state.tasks[0].completed is False
    assert app.state.error == "Could not update the task. Unexpected response from server"


class TestAgainstRealApi:
    """Client and controller wired to the FastAPI app in-process."""

    @pytest.fixture()
    def app(self, app):
        transport = httpx.ASGITransport(app=app)
        return TodoApp(TasksClient(base_url=BASE, transport=transport))

    def test_full_cycle(self, app):
        async def scenario():
            await app.load()
            assert app.state.tasks == ()

            app.set_input("Clean house")
            await app.add()
            task = app.state.tasks[0]
            assert task.completed is False

            await app.toggle(task.id)
            assert app.state.tasks[0].completed is True

            await app.load()
            assert app.state.tasks[0].completed is True
            assert app.state.tasks[0].created_at == task.created_at

            await app.delete(task.id)
            assert app.state.tasks == ()
            await app.load()
            assert app.state.tasks == ()

            await app.delete(task.id)
            assert app.state.error == "Could not delete the task. Task not found"

        run(scenario())
