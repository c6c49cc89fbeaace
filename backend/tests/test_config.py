"""
QuickNotes Backend — Settings Tests
=====================================

What:  Validation rules on Settings (log level, backend name, CORS parsing).
"""

import pytest
from pydantic import ValidationError as PydanticValidationError

from quicknotes.config import Settings


class TestSettings:

    def test_defaults_use_memory_store(self, monkeypatch):
        monkeypatch.delenv("STORE_BACKEND", raising=False)
        assert Settings(_env_file=None).store_backend == "memory"

    def test_log_level_is_uppercased(self):
        assert Settings(log_level="debug").log_level == "DEBUG"

    def test_invalid_log_level_rejected(self):
        with pytest.raises(PydanticValidationError):
            Settings(log_level="chatty")

    def test_unknown_backend_rejected(self):
        with pytest.raises(PydanticValidationError):
            Settings(store_backend="mongo")

    def test_cors_origins_list(self):
        settings = Settings(cors_origins="http://a.test, http://b.test,")
        assert settings.cors_origins_list == ["http://a.test", "http://b.test"]

    def test_database_backend_requires_url(self):
        settings = Settings(store_backend="database", database_url="  ")
        with pytest.raises(ValueError, match="DATABASE_URL"):
            settings.validate_required_for_production()

    def test_memory_backend_needs_nothing(self):
        Settings(store_backend="memory", database_url="").validate_required_for_production()
