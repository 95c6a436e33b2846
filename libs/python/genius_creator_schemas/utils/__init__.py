from .validators import BlankFieldError, ensure_not_blank

__all__ = ["BlankFieldError", "ensure_not_blank"]
