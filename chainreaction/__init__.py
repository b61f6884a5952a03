"""Chain Reaction game engine, AI players and HTTP service."""

__version__ = "0.1.0"
