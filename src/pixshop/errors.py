"""Exception hierarchy for the studio.

Model-side failures derive from ``EditError`` and are converted into
user-visible state by the edit controller, the batch scheduler and the
preset replay engine. The remaining errors signal violated local
preconditions and are raised straight to the caller.
"""


class PixshopError(Exception):
    """Base class for every studio error."""


class EditError(PixshopError):
    """The external model could not produce a usable result."""


class RefusedError(EditError):
    """The model declined the request (safety or policy block)."""


class EmptyResultError(EditError):
    """The model answered without an image or usable text."""

    def __init__(self, message: str, text: str | None = None):
        super().__init__(message)
        self.text = text


class MalformedResponseError(EditError):
    """A structured (JSON) response could not be parsed or validated."""


class MalformedDataUrlError(PixshopError, ValueError):
    """A data URL has no comma separator or no parseable MIME type."""


class InsufficientPointsError(PixshopError, ValueError):
    """A lasso polygon has fewer than three points."""


class NoOpError(PixshopError):
    """Undo or redo was requested with nothing to move to."""


class OperationInProgressError(PixshopError):
    """Another edit is already in flight."""


class MissingSelectionError(PixshopError):
    """A localized or lasso edit was requested without a hotspot or mask."""


class PresetStepError(EditError):
    """One step of a preset replay failed."""

    def __init__(self, step: int, total: int, prompt: str, cause: Exception):
        self.step = step
        self.total = total
        self.prompt = prompt
        self.cause = cause
        super().__init__(f'Failed to apply preset step {step} of {total} "{prompt}". {cause}')
