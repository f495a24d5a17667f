"""Session-scoped reasoning state: typed stores, knowledge graphs and notebooks."""

__version__ = "0.1.0"
