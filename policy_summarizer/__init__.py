"""Insurance policy document extraction and summarization pipeline."""

__version__ = "0.1.0"
