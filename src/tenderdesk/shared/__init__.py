"""Shared utilities and types for TenderDesk."""
