from . import applications, health

__all__ = ["applications", "health"]
