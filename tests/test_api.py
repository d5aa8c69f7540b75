"""Tests for the HTTP endpoints"""

from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from smart_omnibox.config import settings
from smart_omnibox.exceptions import ChatBackendError
from smart_omnibox.main import app, get_chat_client, get_store


@pytest.fixture
def client(store):
    app.dependency_overrides[get_store] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestSmartSuggestions:
    
    def test_empty_input_is_400(self, client):
        response = client.post("/smart-suggestions", json={"input": "", "context": {}})
        
        assert response.status_code == 400
        assert response.json() == {"error": "Input is required"}
    
    def test_missing_input_is_400(self, client):
        response = client.post("/smart-suggestions", json={})
        
        assert response.status_code == 400
    
    def test_wrong_input_type_is_error_body(self, client):
        response = client.post("/smart-suggestions", json={"input": 123})
        
        assert response.status_code == 422
        assert set(response.json()) == {"error"}
        assert response.json()["error"].startswith("input")
    
    def test_null_context_is_accepted(self, client):
        response = client.post("/smart-suggestions", json={"input": "rust", "context": None})
        
        assert response.status_code == 200
        assert response.json()["query"]["context"]["url"] == ""
    
    def test_posted_context_is_limited(self, client):
        response = client.post("/smart-suggestions", json={
            "input": "rust",
            "context": {
                "content": "x" * 6000,
                "headings": [f"h{i}" for i in range(30)],
                "links": [f"ftp://example.com/{i}" for i in range(60)],
            },
        })
        
        context = response.json()["query"]["context"]
        assert len(context["content"]) == 5000
        assert len(context["headings"]) == 20
        assert context["links"] == []
    
    def test_url_scenario(self, client):
        response = client.post("/smart-suggestions", json={"input": "https://example.com"})
        
        assert response.status_code == 200
        body = response.json()
        assert body["query"]["intent"] == {
            "action": "navigate",
            "target": "https://example.com",
            "modifiers": [],
            "confidence": 0.95
        }
        assert body["query"]["type"] == "url"
        assert len(body["suggestions"]) <= 8
    
    def test_question_with_camelcase_context(self, client):
        response = client.post("/smart-suggestions", json={
            "input": "什么是闭包？",
            "context": {"url": "", "title": "", "content": "", "headings": [], "links": []},
        })
        
        body = response.json()
        ai = [s for s in body["suggestions"] if s["type"] == "ai_answer"]
        assert ai
        assert ai[0]["confidence"] >= 0.8
    
    def test_query_history_recorded_for_user(self, client, store):
        response = client.post("/smart-suggestions", json={"input": "rust", "userId": "u1"})
        
        assert response.status_code == 200
        assert [r.query_text for r in store.queries["u1"]] == ["rust"]


def test_analyze_page(client):
    response = client.post("/analyze-page", json={
        "url": "https://example.com/post",
        "html": "<html><head><title>T</title></head><body><main><h1>Hi</h1>Text</main></body></html>"
    })
    
    body = response.json()
    assert body["title"] == "T"
    assert body["headings"] == ["Hi"]
    assert body["content"] == "HiText"


def test_analyze_page_records_visit(client, store):
    client.post("/analyze-page", json={
        "url": "https://example.com/post",
        "html": "<html><head><title>T</title></head><body><main>Closures</main></body></html>"
    })
    
    visit = store.pages["https://example.com/post"]
    assert visit.title == "T"
    assert visit.content == "Closures"
    assert visit.last_visit is not None


class TestAsk:
    
    def test_missing_messages(self, client):
        response = client.post("/ask", json={"messages": []})
        
        assert response.status_code == 400
        assert response.json() == {"error": "Missing messages"}
    
    def test_answer(self, client):
        chat = AsyncMock()
        chat.chat.return_value = {"text": "答案", "model": "deepseek-chat"}
        app.dependency_overrides[get_chat_client] = lambda: chat
        
        response = client.post("/ask", json={"messages": [{"role": "user", "content": "hi"}]})
        
        assert response.status_code == 200
        assert response.json() == {"text": "答案", "model": "deepseek-chat"}
    
    def test_get_answers_question(self, client):
        chat = AsyncMock()
        chat.ask.return_value = {"text": "答案", "model": "deepseek-chat"}
        app.dependency_overrides[get_chat_client] = lambda: chat
        
        response = client.get("/ask", params={"q": " 什么是闭包 "})
        
        assert response.json() == {"text": "答案", "model": "deepseek-chat"}
        chat.ask.assert_awaited_once_with("什么是闭包")
    
    def test_get_without_question(self, client):
        response = client.get("/ask")
        
        assert response.status_code == 400
        assert response.json() == {"error": "Missing question"}
    
    def test_backend_failure_is_500(self, client):
        chat = AsyncMock()
        chat.chat.side_effect = ChatBackendError("DeepSeek API 401: unauthorized")
        app.dependency_overrides[get_chat_client] = lambda: chat
        
        response = client.post("/ask", json={"messages": [{"role": "user", "content": "hi"}]})
        
        assert response.status_code == 500
        assert response.json() == {"error": "DeepSeek API 401: unauthorized"}


class TestOmnibox:
    
    def test_post_navigates(self, client):
        response = client.post("/omnibox", json={"input": "example.com"})
        
        assert response.json()["target"] == "https://example.com"
    
    def test_post_empty(self, client):
        response = client.post("/omnibox", json={"input": ""})
        
        assert response.status_code == 400
    
    def test_save_then_list(self, client):
        client.post("/omnibox", json={"input": "/save example.com"})
        
        response = client.get("/links")
        
        assert [link["url"] for link in response.json()] == ["https://example.com"]
    
    def test_get_redirects(self, client):
        response = client.get("/omnibox", params={"q": "rust"}, follow_redirects=False)
        
        assert response.status_code == 302
        assert response.headers["location"] == "/ask?q=rust"
    
    def test_get_empty_redirects_home(self, client):
        response = client.get("/omnibox", follow_redirects=False)
        
        assert response.headers["location"] == "/"


def test_health(client):
    response = client.get("/health")
    
    assert response.json()["status"] == "healthy"
    assert response.json()["store"] == "healthy"


def test_intents(client):
    assert client.get("/intents").json()["intents"][0] == "history_search"


def test_unexpected_failure_is_error_body(store):
    store.list_links = AsyncMock(side_effect=RuntimeError("boom"))
    app.dependency_overrides[get_store] = lambda: store
    client = TestClient(app, raise_server_exceptions=False)
    
    try:
        response = client.get("/links")
    finally:
        app.dependency_overrides.clear()
    
    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error"}


class TestMetrics:
    
    def test_exposed_when_enabled(self, client):
        response = client.get("/metrics")
        
        assert response.status_code == 200
        assert "suggestion_requests_total" in response.text
    
    def test_disabled(self, client, monkeypatch):
        monkeypatch.setattr(settings, "metrics_enabled", False)
        
        response = client.get("/metrics")
        
        assert response.status_code == 404
        assert response.json() == {"error": "Metrics are disabled"}
