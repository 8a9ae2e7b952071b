"""Search for color-compatible index combinations for multiplexed sequencing."""

__version__ = "1.0.0"
