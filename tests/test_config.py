"""
Tests for configuration loading and validation.
"""

from datetime import time
from pathlib import Path

import pytest
from pydantic import ValidationError

from freetime.config import AppConfig, DefaultsConfig


class TestDefaultsConfig:
    """Tests for DefaultsConfig."""

    def test_defaults(self):
        defaults = DefaultsConfig()

        assert defaults.duration_minutes == 30
        assert defaults.get_start_time() == time(10, 0)
        assert defaults.get_end_time() == time(18, 0)

    @pytest.mark.parametrize("hour", [-1, 24])
    def test_invalid_hour(self, hour):
        with pytest.raises(ValidationError, match="Hour must be between 0 and 23"):
            DefaultsConfig(start_hour=hour)

    def test_end_before_start(self):
        with pytest.raises(ValidationError, match="end_hour must be later than start_hour"):
            DefaultsConfig(start_hour=18, end_hour=10)

    def test_non_positive_duration(self):
        with pytest.raises(ValidationError, match="duration_minutes"):
            DefaultsConfig(duration_minutes=0)


class TestAppConfig:
    """Tests for AppConfig."""

    def test_defaults(self):
        config = AppConfig()

        assert config.lookahead_days == 3
        assert config.busy_calendars == ["UIUC", "Personal", "YMCA"]
        assert config.exclude_days == [5, 6]
        assert config.timezone is None
        assert config.token_cache_file == Path.home() / ".credentials" / "freetime.json"

    def test_exclude_days_are_deduplicated(self):
        config = AppConfig(exclude_days=[6, 5, 6])

        assert config.exclude_days == [6, 5]

    def test_exclude_days_out_of_range(self):
        with pytest.raises(ValidationError, match="between 0 and 6"):
            AppConfig(exclude_days=[7])

    def test_exclude_days_cannot_cover_the_week(self):
        with pytest.raises(ValidationError, match="at least one working day"):
            AppConfig(exclude_days=list(range(7)))

    def test_lookahead_days_must_be_positive(self):
        with pytest.raises(ValidationError, match="lookahead_days"):
            AppConfig(lookahead_days=0)

    def test_unknown_timezone(self):
        with pytest.raises(ValidationError, match="Unknown timezone"):
            AppConfig(timezone="Mars/Olympus_Mons")

    def test_empty_calendar_name(self):
        with pytest.raises(ValidationError, match="empty names"):
            AppConfig(busy_calendars=["Personal", ""])

    def test_working_hours(self):
        config = AppConfig(
            timezone="Europe/Berlin",
            exclude_days=[6],
            defaults={"start_hour": 9, "end_hour": 17},
        )

        working_hours = config.working_hours()

        assert working_hours.start_time == time(9, 0)
        assert working_hours.end_time == time(17, 0)
        assert working_hours.exclude_weekdays == [6]
        assert working_hours.timezone == "Europe/Berlin"


class TestLoadFromYaml:
    """Tests for AppConfig.load_from_yaml."""

    def test_load(self, tmp_path):
        config_path = tmp_path / "config.yaml"
        config_path.write_text(
            "timezone: Europe/Berlin\n"
            "lookahead_days: 5\n"
            "busy_calendars: [Personal]\n"
            "defaults:\n"
            "  duration_minutes: 45\n",
            encoding="utf-8",
        )

        config = AppConfig.load_from_yaml(config_path)

        assert config.timezone == "Europe/Berlin"
        assert config.lookahead_days == 5
        assert config.busy_calendars == ["Personal"]
        assert config.defaults.duration_minutes == 45
        assert config.defaults.start_hour == 10

    def test_empty_file_uses_defaults(self, tmp_path):
        config_path = tmp_path / "config.yaml"
        config_path.write_text("", encoding="utf-8")

        assert AppConfig.load_from_yaml(config_path) == AppConfig()

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError, match="Config file not found"):
            AppConfig.load_from_yaml(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path):
        config_path = tmp_path / "config.yaml"
        config_path.write_text("busy_calendars: [unclosed\n", encoding="utf-8")

        with pytest.raises(ValueError, match="Invalid YAML"):
            AppConfig.load_from_yaml(config_path)

    def test_root_must_be_mapping(self, tmp_path):
        config_path = tmp_path / "config.yaml"
        config_path.write_text("- Personal\n", encoding="utf-8")

        with pytest.raises(ValueError, match="mapping"):
            AppConfig.load_from_yaml(config_path)
