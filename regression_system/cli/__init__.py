"""Command line interface for the regression kit."""
