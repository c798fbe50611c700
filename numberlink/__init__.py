"""Numberlink puzzle solver built on constraint propagation and bounded lookahead."""

__version__ = "1.0.0"
