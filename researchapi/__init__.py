"""Token-protected JSON API for sources, arXiv fetches, papers and extractions."""

__version__ = "0.1.0"