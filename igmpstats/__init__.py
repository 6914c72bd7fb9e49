"""IGMP proxy statistics publisher."""

__version__ = "0.1.0"
