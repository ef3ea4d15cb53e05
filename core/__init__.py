"""
Core Infrastructure Module

Provides foundational services for the scanner system including:
- Configuration management
- Logging setup
- Custom exceptions
- Shared value types
"""
