"""Command line interface for finvault."""
