"""Core utilities and shared infrastructure.

- config: Service configuration loading and validation
- constants: Named constants (service URLs, Esri REST keywords)
- exceptions: Shared exception hierarchy
"""
