"""Margin borrow/repay statistics collector and dashboard."""

__version__ = "0.1.0"
