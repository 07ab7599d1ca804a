"""
Shared utilities: configuration, logging, validation and error types
"""
