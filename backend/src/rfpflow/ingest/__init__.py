"""Mailbox-driven proposal ingestion."""

from .mailbox_watcher import MailboxWatcher
from .pipeline import IngestionOutcome, IngestionPipeline, IngestionResult

__all__ = ["IngestionOutcome", "IngestionPipeline", "IngestionResult", "MailboxWatcher"]
