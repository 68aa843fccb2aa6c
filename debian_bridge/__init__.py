"""debian-bridge — run .deb desktop programs inside Docker containers."""

__version__ = "0.1.0"
