"""kidquiz: quiz generation and play for young learners."""

__version__ = "0.1.0"
