"""The /ai endpoints, with AI disabled (test mode) or a mocked transport."""

import httpx
import pytest

from lifetasks.main import app
from lifetasks.schemas.ai import MAX_OFFSET_DAYS
from lifetasks.services.ai_client import AIClient
from lifetasks.services.ai_service import AIService, get_ai_service

pytestmark = pytest.mark.db


@pytest.fixture
def mock_ai():
    """Route the AI dependency to a MockTransport answering with ``reply``."""

    def _install(reply):
        def handler(request):
            if isinstance(reply, httpx.Response):
                return reply
            return httpx.Response(200, json={"choices": [{"message": {"content": reply}}]})

        client = AIClient(api_key="test-key", transport=httpx.MockTransport(handler))
        app.dependency_overrides[get_ai_service] = lambda: AIService(client, enabled=True)

    yield _install
    app.dependency_overrides.pop(get_ai_service, None)


def _create_task(client, headers, title="Renovate kitchen"):
    resp = client.post("/tasks", json={"title": title}, headers=headers)
    assert resp.status_code == 201
    return resp.json()


def test_breakdown_fallback_shape(client, auth_headers):
    resp = client.post("/ai/breakdown", json={"title": "Renovate kitchen"}, headers=auth_headers)

    assert resp.status_code == 200
    body = resp.json()
    assert body["fallback"] is True
    assert body["task"] is None
    assert [s["priority"] for s in body["subtasks"]] == ["high", "medium", "low"]
    assert [s["dueDateOffsetDays"] for s in body["subtasks"]] == [1, 3, 5]
    assert all(s["title"] for s in body["subtasks"])


def test_breakdown_requires_title(client, auth_headers):
    resp = client.post("/ai/breakdown", json={"description": "no title"}, headers=auth_headers)

    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "validation_error"


def test_breakdown_requires_auth(client):
    assert client.post("/ai/breakdown", json={"title": "x"}).status_code == 401


def test_breakdown_merges_into_task(client, auth_headers):
    task = _create_task(client, auth_headers)
    client.post(f"/tasks/{task['id']}/subtasks", json={"title": "Existing"}, headers=auth_headers)

    resp = client.post(
        "/ai/breakdown",
        json={"title": "Renovate kitchen", "taskId": task["id"]},
        headers=auth_headers,
    )

    assert resp.status_code == 200
    body = resp.json()
    proposals = body["subtasks"]
    merged = body["task"]
    assert merged["aiGenerated"] is True
    assert len(merged["subtasks"]) == 1 + len(proposals)
    assert [s["title"] for s in merged["subtasks"][1:]] == [p["title"] for p in proposals]
    assert all(s["dueDate"] for s in merged["subtasks"][1:])

    stored = client.get(f"/tasks/{task['id']}", headers=auth_headers).json()
    assert stored["aiGenerated"] is True
    assert len(stored["subtasks"]) == 1 + len(proposals)


def test_breakdown_uses_model_output(client, auth_headers, mock_ai):
    mock_ai('{"subtasks": [{"title": "Pick tiles", "priority": "LOW", "dueDateOffsetDays": 2}]}')
    task = _create_task(client, auth_headers)

    body = client.post(
        "/ai/breakdown",
        json={"taskId": task["id"]},
        headers=auth_headers,
    ).json()

    assert body["fallback"] is False
    assert body["subtasks"] == [
        {"title": "Pick tiles", "description": None, "priority": "low", "dueDateOffsetDays": 2}
    ]
    assert [s["title"] for s in body["task"]["subtasks"]] == ["Pick tiles"]


def test_breakdown_on_someone_elses_task_is_forbidden(client, auth_headers, other_headers):
    task = _create_task(client, auth_headers)

    resp = client.post(
        "/ai/breakdown",
        json={"title": "Renovate kitchen", "taskId": task["id"]},
        headers=other_headers,
    )

    assert resp.status_code == 403
    assert client.get(f"/tasks/{task['id']}", headers=auth_headers).json()["subtasks"] == []


def test_prioritize_fallback(client, auth_headers):
    resp = client.post("/ai/prioritize", json={"tasks": [{"title": "X"}]}, headers=auth_headers)

    assert resp.status_code == 200
    tasks = resp.json()
    assert len(tasks) == 1
    assert tasks[0]["title"] == "X"
    assert tasks[0]["priority"] == "medium"
    assert tasks[0]["reasoning"]


def test_prioritize_rejects_empty_list_and_untitled_items(client, auth_headers):
    assert client.post("/ai/prioritize", json={"tasks": []}, headers=auth_headers).status_code == 400
    assert (
        client.post("/ai/prioritize", json={"tasks": [{"priority": "high"}]}, headers=auth_headers).status_code
        == 400
    )


def test_prioritize_with_model_output(client, auth_headers, mock_ai):
    mock_ai('{"tasks": [{"title": "b", "priority": "high", "reasoning": "Due tomorrow"}]}')

    tasks = client.post(
        "/ai/prioritize",
        json={"tasks": [{"title": "A", "dueDate": "2030-01-01"}, {"title": "B"}]},
        headers=auth_headers,
    ).json()

    assert [t["title"] for t in tasks] == ["B", "A"]
    assert tasks[0]["reasoning"] == "Due tomorrow"
    assert tasks[1]["dueDate"] == "2030-01-01"
    assert tasks[1]["priority"] == "medium"


def test_suggestions_inline_and_by_id(client, auth_headers, other_headers):
    inline = client.post(
        "/ai/suggestions",
        json={"task": {"title": "File taxes", "category": "finance"}},
        headers=auth_headers,
    )
    assert inline.status_code == 200
    assert inline.json()["fallback"] is True
    assert "File taxes" in inline.json()["suggestions"]

    task = _create_task(client, auth_headers, title="Book dentist")
    by_id = client.post("/ai/suggestions", json={"taskId": task["id"]}, headers=auth_headers)
    assert by_id.status_code == 200
    assert "Book dentist" in by_id.json()["suggestions"]

    assert client.post("/ai/suggestions", json={"taskId": task["id"]}, headers=other_headers).status_code == 403
    assert client.post("/ai/suggestions", json={}, headers=auth_headers).status_code == 400


def _task_with_subtask(client, headers):
    task = _create_task(client, headers)
    parent = client.post(
        f"/tasks/{task['id']}/subtasks",
        json={"title": "Get quotes"},
        headers=headers,
    ).json()
    return task["id"], parent["subtasks"][0]["id"]


def test_subtask_suggestions_fallback_does_not_mark_ai_assisted(client, auth_headers):
    task_id, subtask_id = _task_with_subtask(client, auth_headers)

    resp = client.post(
        "/ai/subtask-suggestions",
        json={"taskId": task_id, "subtaskId": subtask_id, "question": "How many?"},
        headers=auth_headers,
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["fallback"] is True
    assert body["aiAssisted"] is False
    assert body["subtaskId"] == subtask_id
    stored = client.get(f"/tasks/{task_id}", headers=auth_headers).json()
    assert stored["subtasks"][0]["aiAssisted"] is False


def test_subtask_suggestions_success_marks_ai_assisted(client, auth_headers, mock_ai):
    mock_ai("Ask at least three contractors.")
    task_id, subtask_id = _task_with_subtask(client, auth_headers)

    body = client.post(
        "/ai/subtask-suggestions",
        json={"taskId": task_id, "subtaskId": subtask_id},
        headers=auth_headers,
    ).json()

    assert body["fallback"] is False
    assert body["suggestions"] == "Ask at least three contractors."
    assert body["aiAssisted"] is True
    stored = client.get(f"/tasks/{task_id}", headers=auth_headers).json()
    assert stored["subtasks"][0]["aiAssisted"] is True


def test_subtask_suggestions_upstream_failure_is_fallback(client, auth_headers, mock_ai):
    mock_ai(httpx.Response(500))
    task_id, subtask_id = _task_with_subtask(client, auth_headers)

    body = client.post(
        "/ai/subtask-suggestions",
        json={"taskId": task_id, "subtaskId": subtask_id},
        headers=auth_headers,
    ).json()

    assert body["fallback"] is True
    assert body["aiAssisted"] is False


def test_subtask_suggestions_unknown_subtask(client, auth_headers):
    task_id, _ = _task_with_subtask(client, auth_headers)

    resp = client.post(
        "/ai/subtask-suggestions",
        json={"taskId": task_id, "subtaskId": "00000000-0000-0000-0000-000000000000"},
        headers=auth_headers,
    )

    assert resp.status_code == 404


def test_breakdown_merge_clamps_huge_offsets(client, auth_headers, mock_ai):
    mock_ai('{"subtasks": [{"title": "Plan retirement", "dueDateOffsetDays": 99999999}]}')
    task = _create_task(client, auth_headers)

    resp = client.post("/ai/breakdown", json={"taskId": task["id"]}, headers=auth_headers)

    assert resp.status_code == 200
    body = resp.json()
    assert body["fallback"] is False
    assert body["subtasks"][0]["dueDateOffsetDays"] == MAX_OFFSET_DAYS
    assert body["task"]["subtasks"][0]["dueDate"]
