"""
EventDesk Backend — Settings Tests
====================================
"""

import pytest

from eventdesk.config import Settings


def test_base_path_is_normalized():
    assert Settings(api_base_path="api/v3/app/").api_base_path == "/api/v3/app"
    assert Settings(api_base_path="/").api_base_path == ""


def test_port_env_alias(monkeypatch):
    monkeypatch.setenv("PORT", "8080")
    assert Settings().backend_port == 8080


def test_invalid_log_level():
    with pytest.raises(ValueError):
        Settings(log_level="chatty")


def test_production_requires_real_mongodb_uri():
    with pytest.raises(ValueError, match="MONGODB_URI"):
        Settings(
            environment="Production", mongodb_uri="mongodb://localhost:27017"
        ).validate_required_for_production()


def test_production_with_cluster_uri_passes():
    settings = Settings(
        environment="production",
        mongodb_uri="mongodb+srv://events.example.net",
        cors_origins="https://events.example.com",
    )
    settings.validate_required_for_production()
    assert settings.is_production


def test_development_skips_production_checks():
    Settings(environment="development").validate_required_for_production()
