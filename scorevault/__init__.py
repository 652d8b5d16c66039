"""Score vault: one private score per account, read through query permits or viewing keys."""

__version__ = "0.1.0"
