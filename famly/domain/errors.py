class PendingActionConflictError(RuntimeError):
    """A new proposal was about to replace one that was never confirmed or cancelled."""


class PendingActionEditError(ValueError):
    pass


class NothingPendingError(LookupError):
    pass
