"""Prometheus metrics for rfpflow.

Defines operational metrics for the ingestion pipeline and AI calls.
Exposition over HTTP is left to the hosting process.
"""

from prometheus_client import Counter, Histogram

# Ingestion metrics
messages_ingested_total = Counter(
    "rfpflow_messages_ingested_total",
    "Inbound messages handled by the ingestion pipeline",
    ["outcome"]  # recorded|parse_failed|vendor_unresolved|solicitation_unresolved|extraction_failed|error
)

proposals_recorded_total = Counter(
    "rfpflow_proposals_recorded_total",
    "Proposals persisted",
    ["source"]  # mailbox|manual
)

mailbox_connections_total = Counter(
    "rfpflow_mailbox_connections_total",
    "Mailbox connection attempts",
    ["result"]  # success|error
)

poll_cycles_total = Counter(
    "rfpflow_poll_cycles_total",
    "Mailbox poll cycles",
    ["result"]  # success|error
)

# AI call metrics
ai_calls_total = Counter(
    "rfpflow_ai_calls_total",
    "Total AI API calls",
    ["call_type", "provider", "status"]  # status: success|error
)

ai_latency_ms = Histogram(
    "rfpflow_ai_latency_ms",
    "AI API call latency in milliseconds",
    ["call_type", "provider"],
    buckets=[50, 100, 250, 500, 1000, 2500, 5000, 10000, 30000, 60000]
)

ai_tokens_total = Counter(
    "rfpflow_ai_tokens_total",
    "Total AI tokens consumed",
    ["call_type", "provider", "direction"]  # direction: input|output
)
