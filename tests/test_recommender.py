"""Tests for the recommendation engine client."""
import json

import pytest
from unittest.mock import MagicMock

from models.enums import Severity
from models.workloads import NO_CHANGE
from monitor.recommender import (
    RecommendationEngine, RecommendationError, build_prompt, parse_recommendation,
)

REPLY = {
    "message": "One pod is close to its memory limit.",
    "namespaces": {
        "default": [
            {"name": "api-7d9f", "status": "critical", "cpu": -1, "memory": 1024, "replicas": -1},
        ],
        "batch": [],
    },
}


def _engine_with_reply(content, status_code=200):
    engine = RecommendationEngine("http://llm.test/v1/chat/completions", "test-model", api_key="sk-test")
    resp = MagicMock(status_code=status_code, text="error body", headers={})
    resp.json.return_value = {"choices": [{"message": {"role": "assistant", "content": content}}]}
    session = MagicMock()
    session.headers = engine.client.session.headers
    session.request.return_value = resp
    engine.client.session = session
    return engine


# ── parsing ──────────────────────────────────────────

def test_parse_plain_json():
    rec = parse_recommendation(json.dumps(REPLY))
    assert rec.message.startswith("One pod")
    item = rec.namespaces["default"][0]
    assert item.severity == Severity.CRITICAL
    assert item.memory == 1024
    assert item.cpu == NO_CHANGE
    assert rec.flagged_count == 1


def test_parse_fenced_json():
    content = "```json\n" + json.dumps(REPLY, indent=2) + "\n```"
    assert parse_recommendation(content).flagged_count == 1


def test_parse_json_with_surrounding_prose():
    content = "Here is my analysis:\n" + json.dumps(REPLY) + "\nLet me know if you need more."
    assert parse_recommendation(content).namespaces["default"][0].name == "api-7d9f"


def test_unknown_severity_treated_as_info():
    reply = {"message": "", "namespaces": {"ns": [{"name": "x", "status": "urgent"}]}}
    item = parse_recommendation(json.dumps(reply)).namespaces["ns"][0]
    assert item.severity == Severity.INFO
    assert item.replicas == NO_CHANGE


@pytest.mark.parametrize("content", ["", "no json here", "[1, 2, 3]", "{broken"])
def test_unparseable_reply_raises(content):
    with pytest.raises(RecommendationError):
        parse_recommendation(content)


# ── prompt ───────────────────────────────────────────

def test_prompt_lists_namespaces_and_style(sample_usage):
    prompt = build_prompt(sample_usage, "answer like a pirate")
    assert "Namespace batch:" in prompt
    assert "Namespace default:" in prompt
    assert prompt.index("Namespace batch:") < prompt.index("Namespace default:")
    assert "api-7d9f" in prompt
    assert "96.0% of limit" in prompt
    assert '"namespaces"' in prompt
    assert prompt.rstrip().endswith("answer like a pirate")


def test_prompt_without_style(sample_usage):
    assert "Style of the message field" not in build_prompt(sample_usage)


# ── HTTP ─────────────────────────────────────────────

def test_recommend_posts_chat_completion(sample_usage):
    engine = _engine_with_reply(json.dumps(REPLY))

    rec = engine.recommend(sample_usage, "concise")

    assert rec.flagged_count == 1
    method, url = engine.client.session.request.call_args[0]
    kwargs = engine.client.session.request.call_args.kwargs
    assert method == "POST"
    assert url == "http://llm.test/v1/chat/completions"
    assert kwargs["json"]["model"] == "test-model"
    assert kwargs["json"]["stream"] is False
    assert kwargs["json"]["messages"][0]["role"] == "user"
    assert kwargs["timeout"] == 45
    assert engine.client.session.headers["Authorization"] == "Bearer sk-test"


def test_http_error_raises_recommendation_error(sample_usage):
    engine = _engine_with_reply("", status_code=401)

    with pytest.raises(RecommendationError) as exc:
        engine.recommend(sample_usage)

    assert exc.value.status_code == 401
    assert engine.client.session.request.call_count == 1


def test_unexpected_response_shape(sample_usage):
    engine = _engine_with_reply("")
    engine.client.session.request.return_value.json.return_value = {"error": "quota"}

    with pytest.raises(RecommendationError, match="unexpected LLM response"):
        engine.recommend(sample_usage)


def test_from_config(base_config):
    engine = RecommendationEngine.from_config(base_config)
    assert engine.model == "test-model"
    assert engine.timeout == 45
