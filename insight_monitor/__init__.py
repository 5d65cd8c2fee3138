"""insight-monitor: document and social-post insight pipeline."""

__version__ = "0.1.0"
