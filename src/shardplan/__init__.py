"""shardplan: balance a test suite across parallel executors by measured duration."""

__version__ = "0.1.0"
