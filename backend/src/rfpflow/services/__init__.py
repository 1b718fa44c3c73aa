"""Caller-invoked procurement operations."""

from .procurement_service import ProcurementService

__all__ = ["ProcurementService"]
