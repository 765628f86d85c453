"""Console service for the AudioShake alignment demo."""

__version__ = "0.1.0"
