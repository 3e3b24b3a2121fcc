"""Core utilities and shared infrastructure.

- config: Configuration loading and validation
- constants: Named constants (canvas size, fallback colours, data-URI prefix)
- exceptions: Custom exception hierarchy
- ingress: HTTP request/response helpers for the Functions entry point
"""
