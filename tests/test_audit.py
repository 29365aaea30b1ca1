"""
Tests for the audit log side channel.

Run with:
    pytest tests/test_audit.py -v
"""

from datetime import datetime

from aic2.audit import AuditLogger, diff_hash, format_entry, log_file_name


class TestLogFileName:

    def test_hash_of_empty_diff(self):
        assert diff_hash("") == "ef46db3751d8e999"

    def test_hash_is_deterministic(self):
        assert diff_hash("+foo") == diff_hash("+foo")
        assert diff_hash("+foo") != diff_hash("+bar")
        assert len(diff_hash("+foo")) == 16

    def test_commit_name(self, fixed_now):
        name = log_file_name(fixed_now, "", "commit")
        assert name == "aic2_2024-03-09_14-05-07_ef46db3751d8e999.log"

    def test_review_name(self, fixed_now):
        name = log_file_name(fixed_now, "", "review")
        assert name.startswith("aic2_review_2024-03-09_14-05-07_")

    def test_entry_format(self):
        assert format_entry("ChatGPT", "reply", "prompt") == "[ChatGPT]\n- Response\nreply\n\n- System Prompt\nprompt"


class TestAuditLogger:

    def test_disabled_writes_nothing(self, tmp_path, fixed_now):
        logger = AuditLogger(tmp_path / "logs")
        assert logger.record("ChatGPT", "+foo", "prompt", "reply", "commit", fixed_now) is None
        assert not (tmp_path / "logs").exists()

    def test_creates_nested_directories(self, tmp_path, fixed_now):
        logger = AuditLogger(tmp_path / "a" / "b" / "logs", enabled=True)
        path = logger.record("ChatGPT", "+foo", "prompt", "reply", "commit", fixed_now)
        assert path is not None and path.exists()
        assert path.read_text(encoding="utf-8") == "[ChatGPT]\n- Response\nreply\n\n- System Prompt\nprompt\n\n[Git Diff]\n+foo"

    def test_same_name_prepends_newest_first(self, tmp_path, fixed_now):
        logger = AuditLogger(tmp_path, enabled=True)
        logger.record("ChatGPT", "+foo", "p1", "first", "commit", fixed_now)
        path = logger.record("MistralAI", "+foo", "p2", "second", "commit", fixed_now)

        content = path.read_text(encoding="utf-8")
        assert content.index("[MistralAI]") < content.index("[ChatGPT]")
        assert content.count("[Git Diff]") == 1
        assert content.endswith("[Git Diff]\n+foo")

    def test_different_second_gives_new_file(self, tmp_path, fixed_now):
        logger = AuditLogger(tmp_path, enabled=True)
        first = logger.record("ChatGPT", "+foo", "p", "r", "commit", fixed_now)
        second = logger.record("ChatGPT", "+foo", "p", "r", "commit", datetime(2024, 3, 9, 14, 5, 8))
        assert first != second
        assert len(list(tmp_path.iterdir())) == 2

    def test_write_failure_is_swallowed(self, tmp_path, fixed_now):
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("", encoding="utf-8")
        logger = AuditLogger(blocker, enabled=True)
        assert logger.record("ChatGPT", "+foo", "p", "r", "commit", fixed_now) is None

    def test_expands_user_dir(self):
        assert "~" not in str(AuditLogger("~/.aic2/logs").logs_dir)
