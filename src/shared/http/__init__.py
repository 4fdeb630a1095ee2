from .responses import ResponseBuilder

__all__ = ["ResponseBuilder"]
