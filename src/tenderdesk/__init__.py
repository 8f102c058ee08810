"""TenderDesk: tender tracking client with a reactive query cache."""

__version__ = "0.1.0"
