import json

import pytest

from models.settings_models import AppSettings
from services.settings_service import SETTINGS_FILE, SettingsService
from services.storage_service import StorageService
from utils.constants import DEFAULT_LANGUAGE, DEFAULT_WINDOW_SIZE, DEFAULT_ZOOM


@pytest.fixture
def storage(tmp_path):
    return StorageService(str(tmp_path / "config"))


@pytest.fixture
def settings_service(storage):
    return SettingsService(storage)


class TestStorageService:
    def test_creates_base_directory(self, tmp_path):
        StorageService(str(tmp_path / "nested" / "dir"))
        assert (tmp_path / "nested" / "dir").is_dir()

    def test_save_and_load(self, storage):
        assert storage.save_json("data.json", {"key": "値"}) is True
        assert storage.load_json("data.json") == {"key": "値"}

    def test_missing_file_returns_none(self, storage):
        assert storage.load_json("absent.json") is None

    def test_corrupt_file_returns_none(self, storage):
        with open(storage.get_path("broken.json"), "w", encoding="utf-8") as f:
            f.write("{not json")
        assert storage.load_json("broken.json") is None

    def test_unserializable_data_is_reported(self, storage):
        assert storage.save_json("bad.json", {"value": object()}) is False


class TestSettingsService:
    def test_defaults_when_missing(self, settings_service):
        settings = settings_service.load_data()
        assert settings == AppSettings()
        assert settings.zoom == DEFAULT_ZOOM
        assert settings.window_size == list(DEFAULT_WINDOW_SIZE)

    def test_round_trip(self, settings_service, storage):
        settings_service.save_data(AppSettings(last_directory="/tmp/pdfs", zoom=1.6, window_size=[800, 600]))
        reloaded = SettingsService(storage).load_data()
        assert reloaded == AppSettings(last_directory="/tmp/pdfs", zoom=1.6, window_size=[800, 600])

    def test_corrupt_file_falls_back_to_defaults(self, settings_service, storage):
        with open(storage.get_path(SETTINGS_FILE), "w", encoding="utf-8") as f:
            f.write("garbage")
        assert settings_service.load_data() == AppSettings()

    def test_unexpected_format_falls_back_to_defaults(self, settings_service, storage):
        storage.save_json(SETTINGS_FILE, [{"zoom": 2.0}])
        assert settings_service.load_data() == AppSettings()

    def test_invalid_values_are_replaced(self, settings_service, storage):
        with open(storage.get_path(SETTINGS_FILE), "w", encoding="utf-8") as f:
            json.dump({"last_directory": 3, "zoom": 0.1, "window_size": [0, "x"], "language": "xx"}, f)
        assert settings_service.load_data() == AppSettings()

    def test_load_updates_current_settings(self, settings_service, storage):
        storage.save_json(SETTINGS_FILE, {"zoom": 2.2})
        settings_service.load_data()
        assert settings_service.settings.zoom == 2.2

    def test_language_round_trip(self, settings_service, storage):
        settings_service.save_data(AppSettings(language="en"))
        assert SettingsService(storage).load_data().language == "en"

    @pytest.mark.parametrize("language", ["fr", 1, ["en"], None])
    def test_unknown_language_falls_back_to_default(self, settings_service, storage, language):
        storage.save_json(SETTINGS_FILE, {"language": language})
        assert settings_service.load_data().language == DEFAULT_LANGUAGE
