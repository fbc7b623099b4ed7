"""TechStore inventory: catalog, stock movement ledger and reports."""

__version__ = "1.0.0"
