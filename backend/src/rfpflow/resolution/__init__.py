"""Sender and subject resolution to persisted identities."""

from .identity_resolver import IdentityResolver, extract_solicitation_tag, pick_title_match

__all__ = ["IdentityResolver", "extract_solicitation_tag", "pick_title_match"]
