"""Persistence adapters."""

from .procurement_repository import ProcurementRepository

__all__ = ["ProcurementRepository"]
