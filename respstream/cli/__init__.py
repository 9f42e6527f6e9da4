"""Command line interface for respstream."""
