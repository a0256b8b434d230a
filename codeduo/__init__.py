"""codeduo - two-worker coder/reviewer collaboration pipeline."""

__version__ = "0.1.0"
