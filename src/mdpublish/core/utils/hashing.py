"""Truncated SHA-256 content hashing for Merkle change detection"""

import hashlib


HASH_LENGTH = 16
NODE_SEPARATOR = "|"


def sha256(content: str) -> str:
    """Return hex-encoded SHA-256 hash of content (64 chars)."""
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


def compute_hash(content: str) -> str:
    """Return the first 16 hex chars of the SHA-256 of content."""
    return sha256(content)[:HASH_LENGTH]


def compute_node_hash(content_hash: str, child_hashes: list[str]) -> str:
    """Hash a node's own digest followed by its sorted child digests.

    Sorting makes the result independent of child enumeration order.
    """
    return compute_hash(NODE_SEPARATOR.join([content_hash, *sorted(child_hashes)]))
