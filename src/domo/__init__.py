"""Domo - interactive product demos with a conversational agent."""

__version__ = "0.1.0"
