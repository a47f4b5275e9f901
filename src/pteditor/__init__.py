"""Side-by-side editor for translating .properties files."""

__version__ = "0.1.0"
