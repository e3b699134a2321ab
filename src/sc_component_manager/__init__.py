"""Component manager for knowledge-base components: resolve, download, install."""

__version__ = "0.1.0"
