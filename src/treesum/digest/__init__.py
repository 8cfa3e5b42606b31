"""Digest adapters and the algorithm capability table."""

from treesum.digest.adapter import DigestAdapter
from treesum.digest.registry import AlgorithmTable

__all__ = ["AlgorithmTable", "DigestAdapter"]
