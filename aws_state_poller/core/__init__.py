"""Core utilities and shared infrastructure.

- config: Sweeper configuration loading and validation
- constants: Named constants, timeouts, environment variable names
- exceptions: Custom exception hierarchy
"""
