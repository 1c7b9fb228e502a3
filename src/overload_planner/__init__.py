"""Progressive-overload recommendations for strength training."""

__version__ = "0.1.0"
