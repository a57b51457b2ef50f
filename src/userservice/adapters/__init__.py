"""Driving adapters: HTTP API and command line."""
