"""literature_scout: rate-limited PubMed retrieval for clinical topics."""

__version__ = "0.1.0"
