"""
Core utilities shared by the engine services and the API.

This package provides:
- Application-level settings (engine defaults, CORS, logging level)
- Structured logging with correlation/operation context
- The engine's exception hierarchy
"""
