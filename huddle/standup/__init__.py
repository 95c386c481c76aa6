"""Standup intelligence: action derivation, ranking, quality scoring and digests."""
