"""stock_intake - whole-box and mixed-box warehouse intake, record grouping and group operations."""

__version__ = "0.1.0"
