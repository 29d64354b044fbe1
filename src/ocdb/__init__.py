"""OCDB: live-music venue catalog built from agenda screenshots."""

__version__ = "0.1.0"
