from .context import RequestContext
from .cancellation import CancellationToken

__all__ = ["CancellationToken", "RequestContext"]
