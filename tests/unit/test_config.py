"""
Unit tests for settings and policy construction.
"""

import pytest
from pydantic import ValidationError

from config import Settings
from src.repetition.scheduler import SM2Config


class TestSettings:
    def test_defaults(self, settings):
        assert settings.srs_initial_ease == 2.5
        assert settings.srs_minimum_ease == 1.3
        assert settings.srs_mastery_repetitions == 5
        assert settings.srs_mastery_min_interval == 21
        assert settings.srs_new_cards_first is True

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("SRS_MASTERY_REPETITIONS", "3")
        monkeypatch.setenv("SRS_NEW_CARDS_FIRST", "false")

        settings = Settings(_env_file=None)

        assert settings.srs_mastery_repetitions == 3
        assert settings.srs_new_cards_first is False

    def test_initial_ease_below_floor_rejected(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, srs_initial_ease=1.4, srs_minimum_ease=1.5)

    def test_policy_from_settings(self):
        settings = Settings(_env_file=None, srs_mastery_min_interval=30, srs_lapse_interval=2)

        config = SM2Config.from_settings(settings)

        assert config.mastery_min_interval == 30
        assert config.lapse_interval == 2
        assert config.minimum_easiness == 1.3
