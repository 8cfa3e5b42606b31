"""treesum utility modules."""

from treesum.utils.logging import configure_logging

__all__ = ["configure_logging"]
