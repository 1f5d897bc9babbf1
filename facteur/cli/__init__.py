"""Command line interface for facteur."""
