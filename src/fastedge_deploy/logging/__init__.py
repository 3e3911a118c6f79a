from .config import bind_flow, clear_context, get_logger, setup_logging

__all__ = ["setup_logging", "get_logger", "bind_flow", "clear_context"]
