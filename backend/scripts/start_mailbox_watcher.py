#!/usr/bin/env python3
"""Mailbox Watcher Startup Script for rfpflow.

Polls the configured IMAP inbox for vendor replies, resolves each reply to a
vendor and solicitation, extracts the proposal with the configured LLM
provider and records it.

Usage:
    python scripts/start_mailbox_watcher.py

Environment Variables:
    IMAP_USER, IMAP_PASSWORD: Mailbox credentials (watcher disabled if unset)
    IMAP_HOST, IMAP_PORT: Mailbox server (default port 993)
    IMAP_POLL_INTERVAL_SECONDS: Poll interval (default: 300)
    INGEST_MAX_WORKERS: Concurrent message workers (default: 8)
    DATABASE_URL: SQLAlchemy connection string
    LLM_PROVIDER: openai | anthropic
    OPENAI_API_KEY / ANTHROPIC_API_KEY: Provider credentials
"""

import logging
import os
import sys
import time

# Add backend/src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from rfpflow.config import get_settings
from rfpflow.database import build_engine, build_session_factory, init_db
from rfpflow.extraction import ExtractionClient, ExtractionService
from rfpflow.infrastructure.ai import get_llm_provider
from rfpflow.ingest import IngestionPipeline, MailboxWatcher
from rfpflow.observability import configure_logging

logger = logging.getLogger(__name__)


def main() -> int:
    """Start the mailbox watcher and block until interrupted."""
    settings = get_settings()
    configure_logging(level=settings.LOG_LEVEL, json_format=settings.LOG_JSON)

    logger.info("=== rfpflow Mailbox Watcher Starting ===")
    logger.info(f"Mailbox: {settings.IMAP_HOST}:{settings.IMAP_PORT}/{settings.IMAP_MAILBOX}")
    logger.info(f"Poll Interval: {settings.IMAP_POLL_INTERVAL_SECONDS}s")
    logger.info(f"Max Workers: {settings.INGEST_MAX_WORKERS}")
    logger.info(f"Database: {settings.DATABASE_URL.split('@')[-1]}")  # Hide credentials
    logger.info(f"LLM Provider: {settings.LLM_PROVIDER}")

    if not settings.imap_enabled:
        logger.info("IMAP credentials not configured. Email polling disabled.")
        return 0

    engine = build_engine(settings.DATABASE_URL)
    init_db(engine)
    session_factory = build_session_factory(engine)

    extraction = ExtractionService(
        ExtractionClient(get_llm_provider(settings)),
        extraction_temperature=settings.EXTRACTION_TEMPERATURE,
        comparison_temperature=settings.COMPARISON_TEMPERATURE,
    )
    pipeline = IngestionPipeline(session_factory, extraction)
    watcher = MailboxWatcher.from_settings(settings, pipeline)

    watcher.start()
    logger.info("Press Ctrl+C to stop")

    try:
        while watcher.running:
            time.sleep(1)
    except KeyboardInterrupt:
        logger.info("Shutting down mailbox watcher...")
    finally:
        watcher.stop()
    return 0


if __name__ == '__main__':
    try:
        sys.exit(main())
    except Exception as e:
        logger.error(f"Mailbox watcher failed: {e}", exc_info=True)
        sys.exit(1)
