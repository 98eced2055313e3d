"""
Test suite for the health endpoints.

System role: Verification of liveness routes
"""

from fastapi.testclient import TestClient

from agentchat.api.deps.dependencies import ServiceCache
from agentchat.api.main import create_app
from agentchat.configs import Settings
from agentchat.core.streaming.coordinator import StreamingCoordinator


class TestHealthEndpoints:
    """Test suite for /api/v1/health."""

    def test_health_should_report_healthy(self, fake_store, fake_streamer_factory) -> None:
        # Arrange
        cache = ServiceCache(Settings())
        cache._coordinator = StreamingCoordinator(fake_streamer_factory([]), fake_store)
        cache._chat_service = object()

        # Act
        with TestClient(create_app(services=cache)) as client:
            health = client.get("/api/v1/health")
            generations = client.get("/api/v1/health/generations")

        # Assert
        assert health.status_code == 200
        assert health.json() == {"status": "healthy", "message": "Server Healthy"}
        assert generations.json() == {"status": "healthy", "live_generations": 0}
