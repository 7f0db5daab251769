"""AIService against a mocked chat-completions transport."""

import asyncio
import json

import httpx
import pytest

from lifetasks.errors import ExternalServiceError, ValidationError
from lifetasks.services.ai_client import AIClient
from lifetasks.services.ai_fallbacks import PRIORITIZE_FALLBACK_REASONING
from lifetasks.services.ai_service import AIService, SubtaskContext, merge_prioritization

pytestmark = pytest.mark.unit


def _completion(content):
    return httpx.Response(200, json={"choices": [{"message": {"role": "assistant", "content": content}}]})


def _service(handler, **client_kwargs):
    client = AIClient(
        api_key="test-key",
        base_url="https://ai.test/v1",
        model="test-model",
        transport=httpx.MockTransport(handler),
        **client_kwargs,
    )
    return AIService(client, enabled=True)


def test_client_sends_chat_completion_request():
    seen = {}

    def handler(request):
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["authorization"]
        seen["body"] = json.loads(request.content)
        return _completion('{"subtasks": [{"title": "Step"}]}')

    result = asyncio.run(_service(handler).breakdown("Move house", "Two bedrooms"))

    assert seen["url"] == "https://ai.test/v1/chat/completions"
    assert seen["auth"] == "Bearer test-key"
    assert seen["body"]["model"] == "test-model"
    assert seen["body"]["response_format"] == {"type": "json_object"}
    assert "Move house" in seen["body"]["messages"][1]["content"]
    assert result.fallback is False
    assert result.model == "test-model"
    assert [p.title for p in result.subtasks] == ["Step"]


def test_breakdown_falls_back_on_http_500():
    service = _service(lambda request: httpx.Response(500, json={"error": "boom"}))

    result = asyncio.run(service.breakdown("Renovate kitchen"))

    assert result.fallback is True
    assert [p.priority.value for p in result.subtasks] == ["high", "medium", "low"]
    assert [p.due_date_offset_days for p in result.subtasks] == [1, 3, 5]
    assert all("Renovate kitchen" in p.title for p in result.subtasks)


def test_breakdown_falls_back_on_timeout():
    def handler(request):
        raise httpx.ReadTimeout("too slow", request=request)

    result = asyncio.run(_service(handler).breakdown("Renovate kitchen"))

    assert result.fallback is True
    assert len(result.subtasks) == 3


def test_breakdown_falls_back_on_unparseable_text():
    service = _service(lambda request: _completion("I am not able to help with that."))

    result = asyncio.run(service.breakdown("Renovate kitchen"))

    assert result.fallback is True


def test_client_raises_for_missing_key_and_empty_content():
    client = AIClient(api_key="", transport=httpx.MockTransport(lambda r: _completion("x")))
    with pytest.raises(ExternalServiceError):
        asyncio.run(client.complete("system", "user"))

    empty = AIClient(api_key="k", transport=httpx.MockTransport(lambda r: _completion("   ")))
    with pytest.raises(ExternalServiceError):
        asyncio.run(empty.complete("system", "user"))


def test_disabled_service_never_calls_out():
    def handler(request):
        raise AssertionError("no request expected")

    client = AIClient(api_key="k", transport=httpx.MockTransport(handler))
    service = AIService(client, enabled=False)

    assert asyncio.run(service.breakdown("Anything")).fallback is True
    assert asyncio.run(service.suggest_for_task({"title": "Anything"})).fallback is True


def test_missing_title_rejected_before_any_call():
    calls = []

    def handler(request):
        calls.append(request)
        return _completion("{}")

    service = _service(handler)

    with pytest.raises(ValidationError):
        asyncio.run(service.breakdown("   "))
    with pytest.raises(ValidationError):
        asyncio.run(service.prioritize([{"title": "ok"}, {"priority": "high"}]))
    with pytest.raises(ValidationError):
        asyncio.run(service.prioritize([]))
    with pytest.raises(ValidationError):
        asyncio.run(service.suggest_for_task({"description": "untitled"}))

    assert calls == []


def test_prioritize_matches_by_id_and_title_and_keeps_omitted_tasks():
    reply = json.dumps(
        {
            "tasks": [
                {"title": "GYM", "priority": "low", "reasoning": "Flexible"},
                {"id": "t1", "title": "Taxes (renamed)", "priority": "high", "reasoning": "Deadline"},
                {"title": "Invented task", "priority": "high", "reasoning": "?"},
            ]
        }
    )
    service = _service(lambda request: _completion(reply))
    tasks = [
        {"id": "t1", "title": "Taxes", "category": "finance"},
        {"title": "Gym", "priority": "high"},
        {"title": "Call mom", "priority": "MEDIUM"},
    ]

    result = asyncio.run(service.prioritize(tasks))

    assert result.fallback is False
    assert [t["title"] for t in result.tasks] == ["Gym", "Taxes", "Call mom"]
    assert result.tasks[0]["priority"] == "low"
    assert result.tasks[1]["priority"] == "high"
    assert result.tasks[1]["category"] == "finance"
    assert result.tasks[2]["priority"] == "medium"
    assert result.tasks[2]["reasoning"] == PRIORITIZE_FALLBACK_REASONING


def test_prioritize_fallback_keeps_inputs():
    service = _service(lambda request: httpx.Response(503))

    result = asyncio.run(service.prioritize([{"title": "X"}, {"title": "Y", "priority": "Low"}]))

    assert result.fallback is True
    assert [(t["title"], t["priority"]) for t in result.tasks] == [("X", "medium"), ("Y", "low")]
    assert all(t["reasoning"] for t in result.tasks)


def test_merge_prioritization_fills_missing_reasoning():
    merged = merge_prioritization(
        [{"title": "A"}],
        [{"id": None, "title": "a", "priority": "high", "reasoning": ""}],
    )

    assert merged == [{"title": "A", "priority": "high", "reasoning": "Prioritized by AI."}]


def test_suggestions_success_and_fallback():
    ok = _service(lambda request: _completion("Gather receipts first."))
    result = asyncio.run(ok.suggest_for_task({"title": "Taxes", "category": "finance"}))
    assert result.fallback is False
    assert result.text == "Gather receipts first."

    down = _service(lambda request: httpx.Response(500))
    result = asyncio.run(down.suggest_for_task({"title": "Taxes", "category": "finance"}))
    assert result.fallback is True
    assert "Taxes" in result.text
    assert "finance" in result.text


def test_subtask_suggestion_prompt_carries_context():
    seen = {}

    def handler(request):
        seen["prompt"] = json.loads(request.content)["messages"][1]["content"]
        return _completion("Ask two contractors for quotes.")

    context = SubtaskContext(
        task={"title": "Renovate kitchen"},
        siblings=[{"title": "Measure room"}],
        location="Porto",
        preferences={"theme": "dark"},
    )
    result = asyncio.run(
        _service(handler).suggest_for_subtask(context, {"title": "Get quotes"}, "How many quotes?")
    )

    assert result.fallback is False
    assert "Renovate kitchen" in seen["prompt"]
    assert "Measure room" in seen["prompt"]
    assert "Porto" in seen["prompt"]
    assert "How many quotes?" in seen["prompt"]
    assert result.text == "Ask two contractors for quotes."


def test_breakdown_with_infinite_offset_keeps_model_steps():
    reply = '{"subtasks": [{"title": "Sweep floor", "dueDateOffsetDays": Infinity}]}'

    result = asyncio.run(_service(lambda request: _completion(reply)).breakdown("Clean garage"))

    assert result.fallback is False
    assert [p.title for p in result.subtasks] == ["Sweep floor"]
    assert result.subtasks[0].due_date_offset_days is None


def test_parser_crash_is_absorbed_as_fallback(monkeypatch):
    def broken_parser(text):
        raise RuntimeError("unexpected shape")

    monkeypatch.setattr("lifetasks.services.ai_service.parse_breakdown", broken_parser)
    service = _service(lambda request: _completion('{"subtasks": [{"title": "Step"}]}'))

    result = asyncio.run(service.breakdown("Clean garage"))

    assert result.fallback is True
    assert len(result.subtasks) == 3
