"""Error hierarchy for draft loading and publishing.

Splits failures the operator can recover from by re-triggering an action
(reload, publish again) from failures that indicate broken staging logic.
Nothing in the engine retries on its own; callers decide what to show.

Example usage:
    try:
        result = await editor.publish()
    except PublishRejectedError:
        # drafts are still staged, offer retry / discard
        ...
"""


class DraftSyncError(Exception):
    """Base exception for all draft engine errors."""

    pass


class RecoverableError(DraftSyncError):
    """Failure that leaves local state intact and may succeed when re-triggered.

    Examples: a baseline fetch timing out, the backend rejecting a publish.
    """

    pass


class LoadError(RecoverableError):
    """A baseline or reference fetch failed.

    No partial data is installed; the previous baseline stays in place.
    """

    pass


class PublishRejectedError(RecoverableError):
    """The persistence collaborator rejected a publish.

    Drafts are not cleared and the baseline is not updated.
    """

    pass


class PublishInProgressError(DraftSyncError):
    """A publish for the same scope is already awaiting a response."""

    pass


class IntegrityViolation(DraftSyncError):
    """A draft breaks a staging invariant.

    Examples: a delete draft whose original has no id, a class selected under
    a grade level that is not selected.
    """

    pass
