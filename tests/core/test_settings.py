"""Tests for core.settings module.

Covers:
- DocSpineSettings defaults
- Environment variable override (DOCSPINE_ prefix)
- Field validation
- FirestoreSettings credentials
"""

import pytest
from pydantic import ValidationError

from docspine.core.settings import DocSpineSettings, FirestoreSettings


class TestDocSpineSettingsDefaults:
    def test_default_id_field(self):
        assert DocSpineSettings().id_field == "_id"

    def test_default_paging(self):
        s = DocSpineSettings()
        assert s.page_size == 10
        assert s.max_page_size == 100
        assert s.max_limit == -1

    def test_default_reconnect_delay(self):
        assert DocSpineSettings().reconnect_delay_seconds == 1.0

    def test_default_logging(self):
        s = DocSpineSettings()
        assert s.log_level == "INFO"
        assert s.json_logs is None


class TestDocSpineSettingsEnvOverride:
    def test_id_field_from_env(self, monkeypatch):
        monkeypatch.setenv("DOCSPINE_ID_FIELD", "uuid")
        assert DocSpineSettings().id_field == "uuid"

    def test_reconnect_delay_from_env(self, monkeypatch):
        monkeypatch.setenv("DOCSPINE_RECONNECT_DELAY_SECONDS", "0.25")
        assert DocSpineSettings().reconnect_delay_seconds == 0.25

    def test_json_logs_from_env(self, monkeypatch):
        monkeypatch.setenv("DOCSPINE_JSON_LOGS", "true")
        assert DocSpineSettings().json_logs is True

    def test_unprefixed_env_ignored(self, monkeypatch):
        monkeypatch.setenv("ID_FIELD", "slug")
        assert DocSpineSettings().id_field == "_id"


class TestDocSpineSettingsValidation:
    def test_empty_id_field_rejected(self):
        with pytest.raises(ValidationError):
            DocSpineSettings(id_field="")

    def test_negative_delay_rejected(self):
        with pytest.raises(ValidationError):
            DocSpineSettings(reconnect_delay_seconds=-1)

    def test_zero_page_size_rejected(self):
        with pytest.raises(ValidationError):
            DocSpineSettings(page_size=0)


class TestFirestoreSettings:
    def test_defaults_are_unset(self):
        s = FirestoreSettings()
        assert s.api_key is None
        assert s.project_id is None

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("DOCSPINE_FIRESTORE_API_KEY", "key-123")
        monkeypatch.setenv("DOCSPINE_FIRESTORE_PROJECT_ID", "demo-project")
        s = FirestoreSettings()
        assert s.api_key == "key-123"
        assert s.project_id == "demo-project"
