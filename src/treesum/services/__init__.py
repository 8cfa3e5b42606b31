"""treesum services layer.

The walker discovers work, the pool hashes it, the aggregator
merges per-root streams and the engine ties them together.
"""

from treesum.services.aggregator import ResultAggregator
from treesum.services.engine import ChecksumEngine
from treesum.services.pool import InFlightCounter, WorkerPool
from treesum.services.processor import FileProcessor
from treesum.services.walker import TreeWalker

__all__ = [
    "ChecksumEngine",
    "FileProcessor",
    "InFlightCounter",
    "ResultAggregator",
    "TreeWalker",
    "WorkerPool",
]
