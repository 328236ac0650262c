"""SourceScan — registry of verified contract builds."""

__version__ = "0.1.0"
