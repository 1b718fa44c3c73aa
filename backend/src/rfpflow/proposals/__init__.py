"""Proposal recording and comparison."""

from .comparison import ComparedProposal, ComparisonEngine, ComparisonReport, build_comparison_context
from .recorder import ProposalRecorder

__all__ = [
    "ComparedProposal",
    "ComparisonEngine",
    "ComparisonReport",
    "ProposalRecorder",
    "build_comparison_context",
]
