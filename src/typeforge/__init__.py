"""typeforge: type-specialized C container code generator."""

__version__ = "0.1.0"
