"""Command line interface for flatbridge."""
