"""A FOCAL interpreter and the scoring and board rules of a brick-breaking game."""

__version__ = "0.1.0"