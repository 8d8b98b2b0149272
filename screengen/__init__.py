"""screengen — CSV-driven screen scaffolding generator."""

__version__ = "0.1.0"
