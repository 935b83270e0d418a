from typing import Any, Optional


class PipelineError(Exception):
    """Base class for errors raised while processing a usage report"""
    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class InputGuardSkip(PipelineError):
    """Trigger payload or configuration is incomplete, the run is skipped without an audit record"""


class ResolutionError(PipelineError):
    """Storage reference could not be turned into a public address"""


class DetectionServiceError(PipelineError):
    """Plate recognition call failed (network, timeout or non-2xx)"""
    def __init__(self, message: str, status_code: Optional[int] = None, body: Any = None):
        self.status_code = status_code
        self.body = body
        super().__init__(message)


class NoPlateDetected(PipelineError):
    """Recognition returned no candidates. Not a failure"""
    def __init__(self, message: str = "No plate detected in image"):
        super().__init__(message)


class UnregisteredOwner(PipelineError):
    """No registered owner for the detected plate. Not a failure"""
    def __init__(self, plate: str):
        self.plate = plate
        super().__init__(f"No registered user for plate: {plate}")


class DispatchError(PipelineError):
    """Push broadcast was rejected"""
    def __init__(self, message: str, status_code: Optional[int] = None, body: Any = None):
        self.status_code = status_code
        self.body = body
        super().__init__(message)


class TopicSubscriptionError(PipelineError):
    """Adding or removing a device token from a topic failed"""
    def __init__(self, message: str, status_code: Optional[int] = None, body: Any = None):
        self.status_code = status_code
        self.body = body
        super().__init__(message)


def error_details(error: Exception) -> Any:
    """Structured upstream body carried by an error, if any"""
    return getattr(error, "body", None)
