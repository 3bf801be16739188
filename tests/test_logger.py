"""
Tests for the static Logger and its storage strategies.
"""

import pytest

from nervechip.logger import Logger, LocalFileStrategy, LogStorageStrategy, MemoryLogStrategy


class TestMemoryStrategy:
    """Tests for in-memory log storage."""

    def test_stores_with_priority(self):
        memory = MemoryLogStrategy()
        Logger.set_log_storage_strategy(memory)
        Logger.log("debug message")
        Logger.log("info message", Logger.LogPriority.INFO)

        assert memory.messages() == ["debug message", "info message"]
        assert memory.messages("INFO") == ["info message"]
        assert memory.messages("DEBUG") == ["debug message"]

    def test_max_entries_drops_oldest(self):
        memory = MemoryLogStrategy(max_entries=2)
        Logger.set_log_storage_strategy(memory)
        for i in range(3):
            Logger.log(f"m{i}")
        assert memory.messages() == ["m1", "m2"]

    def test_flush_clears(self):
        memory = MemoryLogStrategy()
        Logger.set_log_storage_strategy(memory)
        Logger.log("x")
        Logger.flush_logs()
        assert memory.entries == []

    def test_disable_and_enable(self):
        memory = MemoryLogStrategy()
        Logger.set_log_storage_strategy(memory)
        Logger.disable_logging()
        Logger.log("hidden")
        Logger.enable_logging()
        Logger.log("shown")

        messages = memory.messages()
        assert "hidden" not in messages
        assert "shown" in messages

    def test_no_strategy_is_silent(self):
        Logger.log("nowhere", Logger.LogPriority.ERROR)


class TestLocalFileStrategy:
    """Tests for file-backed logging."""

    def test_writes_formatted_lines(self, tmp_path):
        path = tmp_path / "logs" / "session.txt"
        Logger.set_log_storage_strategy(LocalFileStrategy(str(path)))
        Logger.log("stage entered", Logger.LogPriority.INFO)

        text = path.read_text()
        assert "LOG INITIALIZATION" in text
        assert "[INFO] stage entered" in text

    def test_existing_file_is_flushed(self, tmp_path):
        path = tmp_path / "session.txt"
        path.write_text("old contents\n")
        LocalFileStrategy(str(path))
        text = path.read_text()
        assert "old contents" not in text
        assert "LOG FLUSHED" in text

    def test_initialize_uses_env_path(self, tmp_path, monkeypatch):
        path = tmp_path / "env_log.txt"
        monkeypatch.setenv(Logger.LOG_PATH_ENV_VAR, str(path))
        Logger.initialize()
        assert isinstance(Logger.log_storage_strategy, LocalFileStrategy)
        assert "Logger initialized" in path.read_text()


class TestBaseStrategy:
    """Tests for the abstract strategy."""

    def test_base_methods_not_implemented(self):
        strategy = LogStorageStrategy()
        with pytest.raises(NotImplementedError):
            strategy.store_log("m", "INFO", "now")
        with pytest.raises(NotImplementedError):
            strategy.flush_logs()
