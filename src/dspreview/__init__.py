"""Dataset preview client: tabular preview and schema normalization."""

__version__ = "0.1.0"
