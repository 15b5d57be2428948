"""Tests for config file parsing."""

from pathlib import Path

from careercal.config import Config, load_config, parse_config


class TestParseConfig:
    def test_defaults(self):
        config = parse_config("")
        assert config == Config()
        assert config.max_instances == 52
        assert config.min_confidence == 50

    def test_values(self):
        config = parse_config(
            """
            # careercal settings
            TIMEZONE=America/New_York
            EVENTS_FILE="~/cal/events.json"
            USER_ID=dana
            MAX_INSTANCES=104
            MIN_CONFIDENCE=70
            REMINDER_WINDOW_MINUTES=10
            TELEGRAM_BOT_TOKEN='123:abc'
            TELEGRAM_CHAT_IDS=111, 222
            CLAUDE_MODEL=sonnet  # faster
            """
        )

        assert config.timezone == "America/New_York"
        assert config.events_file == "~/cal/events.json"
        assert config.user_id == "dana"
        assert config.max_instances == 104
        assert config.min_confidence == 70
        assert config.reminder_window_minutes == 10
        assert config.telegram_bot_token == "123:abc"
        assert config.telegram_chat_ids == [111, 222]
        assert config.claude_model == "sonnet"

    def test_invalid_numbers_keep_defaults(self, caplog):
        config = parse_config("MAX_INSTANCES=lots\nREMINDER_CHECK_MINUTES=0\nTELEGRAM_CHAT_IDS=abc")

        assert config.max_instances == 52
        assert config.reminder_check_minutes == 5
        assert config.telegram_chat_ids == []
        assert "MAX_INSTANCES" in caplog.text

    def test_zero_confidence_accepted(self):
        assert parse_config("MIN_CONFIDENCE=0").min_confidence == 0

    def test_confidence_out_of_range_keeps_default(self, caplog):
        config = parse_config("MIN_CONFIDENCE=150")

        assert config.min_confidence == 50
        assert "MIN_CONFIDENCE must be 0-100" in caplog.text

    def test_work_hours(self):
        assert parse_config("WORK_HOURS=08:00-18:00").work_hour_range == (8, 18)
        assert Config().work_hour_range == (9, 17)

    def test_malformed_work_hours_fall_back(self, caplog):
        assert Config(work_hours="late").work_hour_range == (9, 17)
        assert Config(work_hours="17:00-09:00").work_hour_range == (9, 17)
        assert "WORK_HOURS" in caplog.text

    def test_unknown_keys_and_junk_ignored(self):
        config = parse_config("SOMETHING=else\nnot a setting\nTIMEZONE=UTC")
        assert config.timezone == "UTC"

    def test_events_path(self):
        assert Config(events_file="/tmp/e.json").events_path == Path("/tmp/e.json")
        assert Config().events_path.name == "events.json"


class TestLoadConfig:
    def test_missing_file_gives_defaults(self, tmp_path):
        assert load_config(tmp_path / "nope.conf") == Config()

    def test_reads_file(self, tmp_path):
        path = tmp_path / "careercal.conf"
        path.write_text("TIMEZONE=Europe/Berlin\n")
        assert load_config(path).timezone == "Europe/Berlin"
