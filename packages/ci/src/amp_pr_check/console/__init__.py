from .reporter import Reporter, cyan, format_elapsed, green

__all__ = ["Reporter", "cyan", "green", "format_elapsed"]
