from .logger import JsonFormatter, configure_logging

__all__ = ["JsonFormatter", "configure_logging"]
