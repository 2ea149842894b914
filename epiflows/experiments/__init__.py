"""Batch experiments driven from the command line."""
