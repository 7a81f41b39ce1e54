"""Built-in collection methods."""

from partsmith.methods.render import render_method

__all__ = ["render_method"]
