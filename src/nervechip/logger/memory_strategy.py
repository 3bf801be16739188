from .log_storage_strategy import LogStorageStrategy


class MemoryLogStrategy(LogStorageStrategy):
    """
    Keeps log entries in memory as (timestamp, priority, message) tuples.

    Used by the headless trace runner's verbose mode, which echoes the
    collected entries after a run instead of writing a session file.
    """

    def __init__(self, max_entries=10000):
        self.max_entries = max_entries
        self.entries = []

    def store_log(self, message, priority, timestamp):
        self.entries.append((timestamp, priority, message))
        # Oldest entries go first once the cap is hit
        if len(self.entries) > self.max_entries:
            del self.entries[0]

    def flush_logs(self):
        self.entries.clear()

    def messages(self, priority=None):
        """Return stored messages, optionally only those of one priority name."""
        return [m for _, p, m in self.entries if priority is None or p == priority]
