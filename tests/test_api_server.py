"""Tests for NoteMap API server and configuration."""

import importlib.util
import json
import sys
import tempfile
from pathlib import Path
from tempfile import TemporaryDirectory
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from notemap.api.config import APIConfig, ServerConfig
from notemap.api.server import app, create_app
from notemap.notes import InMemoryKeyValueStore, NoteStore, NoteStoreConfig
from notemap.notes.config import STORE_PATH_ENV


class TestAPIConfig:
    """Test suite for API configuration."""

    def test_server_config_defaults(self):
        """Test ServerConfig default values."""
        config = ServerConfig()
        assert config.host == "127.0.0.1"
        assert config.port == 8000
        assert config.cors_origins == ["*"]
        assert config.debug is False

    def test_api_config_defaults(self):
        """Test APIConfig default values."""
        config = APIConfig()
        assert isinstance(config.server, ServerConfig)

    def test_api_config_from_file(self):
        """Test loading APIConfig from a JSON file."""
        config_data = {
            "server": {
                "host": "0.0.0.0",
                "port": 9000,
                "cors_origins": ["http://localhost:8081"],
                "debug": True
            }
        }

        with tempfile.NamedTemporaryFile(
            mode='w', suffix='.json', delete=False
        ) as f:
            json.dump(config_data, f)
            temp_path = Path(f.name)

        try:
            config = APIConfig.from_file(temp_path)

            assert config.server.host == "0.0.0.0"
            assert config.server.port == 9000
            assert config.server.cors_origins == ["http://localhost:8081"]
            assert config.server.debug is True
        finally:
            temp_path.unlink()

    def test_debug_sets_log_level(self):
        """Test that debug switches the server log level."""
        assert ServerConfig().log_level == "info"
        assert ServerConfig(debug=True).log_level == "debug"

    def test_run_script_passes_log_level(self, monkeypatch):
        """Test that the launcher hands the configured log level to uvicorn."""
        script = Path(__file__).parent.parent / "scripts" / "run_api_server.py"
        spec = importlib.util.spec_from_file_location("run_api_server", script)
        module = importlib.util.module_from_spec(spec)
        spec.loader.exec_module(module)

        config = APIConfig(server=ServerConfig(debug=True))
        monkeypatch.setattr(module, "load_config", lambda: config)
        monkeypatch.setattr(sys, "argv", ["run_api_server.py"])

        with patch("uvicorn.run") as mock_run:
            module.main()

        assert mock_run.call_args.kwargs["log_level"] == "debug"
        assert mock_run.call_args.kwargs["port"] == 8000

    def test_api_config_from_missing_file(self):
        """Test APIConfig returns defaults when file doesn't exist."""
        config = APIConfig.from_file(Path("/nonexistent/config.json"))

        assert config.server.host == "127.0.0.1"
        assert config.server.port == 8000

    def test_default_config_path(self):
        """Test default config path points to correct location."""
        path = APIConfig.default_config_path()
        assert path.name == "api_config.json"
        assert "configs" in str(path)


class TestHealthEndpoints:
    """Test suite for health endpoints."""

    @pytest.fixture
    def backend(self):
        """Create an empty in-memory backend."""
        return InMemoryKeyValueStore()

    @pytest.fixture
    def client(self, backend):
        """Create test client."""
        return TestClient(create_app(store=NoteStore(backend)))

    def test_health_check(self, client):
        """Test health check endpoint."""
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert response.json()["notes"] == 0

    def test_health_reports_corrupt_store(self, client, backend):
        """Test that unreadable notes degrade the health status."""
        backend.data[NoteStoreConfig().notes_key] = "garbage"

        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "degraded"

    def test_root(self):
        """Test root endpoint."""
        response = TestClient(app).get("/")
        assert response.status_code == 200
        assert response.json()["name"] == "NoteMap API"


class TestStartup:
    """Test suite for store creation at startup."""

    def test_lifespan_builds_file_store(self, monkeypatch):
        """Test that a store is created from configuration when none is given."""
        with TemporaryDirectory() as tmpdir:
            store_path = Path(tmpdir) / "store.json"
            monkeypatch.setenv(STORE_PATH_ENV, str(store_path))
            test_app = create_app()

            with TestClient(test_app) as client:
                assert isinstance(test_app.state.store, NoteStore)
                response = client.post(
                    "/api/v1/notes",
                    json={"title": "Cafe", "latitude": 10, "longitude": 20},
                )
                assert response.status_code == 201

            assert store_path.exists()

    def test_given_store_is_kept(self):
        """Test that an injected store is not replaced at startup."""
        store = NoteStore(InMemoryKeyValueStore())
        test_app = create_app(store=store)

        with TestClient(test_app):
            assert test_app.state.store is store


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
