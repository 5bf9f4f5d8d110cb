from .logging import build_log_context, get_logger, log_event

__all__ = ["build_log_context", "get_logger", "log_event"]
