"""In-memory versioned file store with snapshots, rollback and analytics."""

__version__ = "1.0.0"
