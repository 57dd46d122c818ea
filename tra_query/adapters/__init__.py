"""Adapters layer - Concrete implementations of ports.

This module contains implementations of the port interfaces,
connecting the engine to external systems such as station datasets
stored as CSV or JSON files.
"""
