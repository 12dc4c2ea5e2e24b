"""Core domain: models, ports and errors."""
