"""Exception hierarchy shared by the face gate pipeline."""


class FaceGateError(Exception):
    """Base exception for face gate errors."""
    pass

class CaptureError(FaceGateError):
    """Exception raised when a still image cannot be captured."""
    pass

class StorageError(FaceGateError):
    """Exception raised when the persisted profile cannot be read or written."""
    pass

class DegenerateProfileError(FaceGateError):
    """Exception raised when a stored or candidate face box has zero area."""
    pass

class SessionBusyError(FaceGateError):
    """Exception raised when a capture is requested while another is in flight."""
    pass
