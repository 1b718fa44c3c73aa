"""rfpflow - inbound proposal ingestion for RFP procurement."""

__version__ = "0.1.0"
