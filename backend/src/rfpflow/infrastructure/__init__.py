"""Infrastructure adapters (AI providers, mailbox access, MIME parsing)."""
