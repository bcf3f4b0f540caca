"""CVM Capital - investment tracking and monthly profit distribution."""

__version__ = "1.0.0"
