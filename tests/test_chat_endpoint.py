"""Integration tests for the /api/chat endpoint."""
import pytest
from fastapi.testclient import TestClient
from unittest.mock import AsyncMock, Mock, patch
import sys
import os

# Add backend to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'backend'))


@pytest.fixture
def client():
    """Create a test client with a proxy whose upstream SDK is mocked."""
    # Import after path is set
    from main import app
    import main
    from services.chat_proxy import ProxyService
    
    with patch('services.chat_proxy.AsyncGroq') as mock_groq_class:
        create = AsyncMock(return_value=Mock(choices=[Mock(message=Mock(content="Hello!"))]))
        mock_groq_class.return_value.chat.completions.create = create
        
        # Mock the startup event to avoid reading the real credential
        with patch('main.startup_event'):
            main.proxy_service = ProxyService(api_key="test_key")
            test_client = TestClient(app)
            test_client.upstream = create
            yield test_client


def test_chat_success(client):
    response = client.post("/api/chat", json={"message": "hi"})
    
    assert response.status_code == 200
    assert response.json() == {"response": "Hello!"}
    client.upstream.assert_awaited_once()


@pytest.mark.parametrize("method", ["get", "put", "delete", "patch", "options"])
def test_chat_rejects_other_methods(client, method):
    response = client.request(method.upper(), "/api/chat")
    
    assert response.status_code == 405
    assert response.json()["error"] == "Method not allowed"
    client.upstream.assert_not_awaited()


def test_chat_rejects_head(client):
    response = client.head("/api/chat")
    
    assert response.status_code == 405
    client.upstream.assert_not_awaited()


def test_chat_cors_preflight_is_not_rejected(client):
    from config import CORS_ORIGINS
    
    response = client.options(
        "/api/chat",
        headers={"Origin": CORS_ORIGINS[0], "Access-Control-Request-Method": "POST"}
    )
    
    assert response.status_code == 200
    assert "access-control-allow-origin" in response.headers
    client.upstream.assert_not_awaited()


@pytest.mark.parametrize("payload", [{}, {"message": ""}, {"message": "    "}])
def test_chat_requires_message(client, payload):
    response = client.post("/api/chat", json=payload)
    
    assert response.status_code == 400
    assert response.json() == {"error": "Message is required", "kind": "invalid_input"}
    client.upstream.assert_not_awaited()


def test_chat_malformed_json(client):
    response = client.post("/api/chat", content=b"{not json", headers={"Content-Type": "application/json"})
    
    assert response.status_code == 400
    assert response.json()["error"] == "Message is required"


def test_chat_without_credential(client):
    import main
    from services.chat_proxy import ProxyService
    
    with patch('services.chat_proxy.GROQ_API_KEY', None):
        main.proxy_service = ProxyService(api_key=None)
    
    response = client.post("/api/chat", json={"message": "hi"})
    
    assert response.status_code == 500
    assert response.json()["kind"] == "misconfigured"
    client.upstream.assert_not_awaited()


def test_chat_with_empty_credential(client):
    import main
    from services.chat_proxy import ProxyService
    
    main.proxy_service = ProxyService(api_key="")
    
    response = client.post("/api/chat", json={"message": "hi"})
    
    assert response.status_code == 500
    assert response.json()["kind"] == "misconfigured"
    client.upstream.assert_not_awaited()


def test_chat_upstream_rate_limit(client):
    import httpx
    from groq import RateLimitError
    
    request = httpx.Request("POST", "https://api.groq.com/openai/v1/chat/completions")
    body = {"error": {"message": "Rate limit reached", "code": "rate_limit_exceeded"}}
    client.upstream.side_effect = RateLimitError(
        message="Rate limit reached",
        response=httpx.Response(429, request=request, json=body),
        body=body
    )
    
    response = client.post("/api/chat", json={"message": "hi"})
    
    assert response.status_code == 429
    assert response.json() == {
        "error": "Rate limit exceeded. Please wait a moment and try again.",
        "kind": "rate_limited",
        "code": "rate_limit_exceeded",
        "upstream_message": "Rate limit reached",
    }


def test_health_reports_credential_without_leaking_it(client):
    response = client.get("/health")
    
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["credential_configured"] is True
    assert "test_key" not in response.text


def test_http_client_against_app(client):
    """The controller's HTTP transport decodes what the endpoint emits."""
    import asyncio
    import httpx
    import main
    from services.conversation_controller import ConversationController
    from services.proxy_client import HttpProxyClient
    
    transport = httpx.ASGITransport(app=main.app)
    controller = ConversationController(HttpProxyClient("http://testserver/api/chat", transport=transport))
    
    asyncio.run(controller.submit("hi"))
    
    assert [t.text for t in controller.transcript] == ["hi", "Hello!"]
    assert controller.pending is False


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
