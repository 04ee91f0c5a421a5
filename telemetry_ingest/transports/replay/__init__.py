from .transport import StreamLineTransport

__all__ = ["StreamLineTransport"]
