"""treesum: concurrent file and directory checksums."""

__version__ = "0.1.0"
