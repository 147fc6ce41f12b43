"""
Core Module

Foundational components: configuration, logging, exceptions, and the
worker pool used to run blocking work off the event loop.
"""
