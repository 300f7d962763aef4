from datetime import datetime

import pytest

import spanparser
from spanparser.conf import Settings, SettingValidationError, apply_settings


class TestSettings:

    def test_defaults(self):
        settings = Settings()
        assert settings.PARSER_FORMAT == "auto"
        assert settings.TIMEZONE == "UTC"
        assert settings.RELATIVE_BASE is None

    def test_user_values(self):
        base = datetime(2024, 1, 1)
        settings = Settings({"PARSER_FORMAT": "simple", "RELATIVE_BASE": base})
        assert settings.PARSER_FORMAT == "simple"
        assert settings.RELATIVE_BASE is base

    def test_replace(self):
        settings = Settings().replace(TIMEZONE="local")
        assert settings.TIMEZONE == "local"
        assert settings.PARSER_FORMAT == "auto"

    @pytest.mark.parametrize("values", [
        {"UNKNOWN": 1},
        {"PARSER_FORMAT": "go"},
        {"TIMEZONE": "Europe/Amsterdam"},
        {"RELATIVE_BASE": "2024-01-01"},
    ])
    def test_invalid(self, values):
        with pytest.raises(SettingValidationError):
            Settings(values)


class TestApplySettings:

    def test_dict_is_converted(self):
        seen = {}

        @apply_settings
        def configured(settings=None):
            seen["settings"] = settings

        configured(settings={"PARSER_FORMAT": "iso8601"})
        assert isinstance(seen["settings"], Settings)
        assert seen["settings"].PARSER_FORMAT == "iso8601"

    def test_none_uses_shared_default(self):
        @apply_settings
        def configured(settings=None):
            return settings

        assert configured() is configured()
        assert configured() is spanparser.conf.settings

    def test_rejects_other_types(self):
        with pytest.raises(TypeError):
            spanparser.parse("1s", settings=["PARSER_FORMAT"])

    def test_invalid_setting_surfaces_from_parse(self):
        with pytest.raises(SettingValidationError):
            spanparser.parse("1s", settings={"PARSER_FORMAT": "regex"})
