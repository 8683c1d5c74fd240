from .call import CallSession, SessionState

__all__ = ["CallSession", "SessionState"]
