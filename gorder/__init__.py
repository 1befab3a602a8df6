"""Order, stock, payment and kitchen services for a small ordering system."""

__version__ = "0.1.0"