"""Error codes and the exception kinds recovered by the pipeline controller.

Adapters raise these; the controller catches them and turns each into a
Failed phase plus a single user-visible message.
"""

ERR_BUSY = "BUSY"
ERR_SUPERSEDED = "SUPERSEDED"
ERR_UNKNOWN = "UNKNOWN"
ERR_PERMISSION_DENIED = "PERMISSION_DENIED"
ERR_DEVICE_UNAVAILABLE = "DEVICE_UNAVAILABLE"
ERR_NO_ACTIVE_SESSION = "NO_ACTIVE_SESSION"
ERR_ENCODING = "ENCODING_ERROR"
ERR_TRANSPORT = "TRANSPORT_FAILURE"
ERR_SERVICE = "SERVICE_REPORTED_FAILURE"
ERR_SPEECH = "SPEECH_ERROR"


class PipelineError(Exception):
    code = ERR_UNKNOWN
    retryable = False
    default_message = "Something went wrong. Please try again."

    def __init__(self, detail: str | None = None):
        super().__init__(detail or self.default_message)
        self.detail = detail

    @property
    def user_message(self) -> str:
        return self.default_message


class PermissionDenied(PipelineError):
    code = ERR_PERMISSION_DENIED
    default_message = (
        "Error accessing camera. Please make sure you have allowed camera access "
        "in your system or browser settings, then start the camera again."
    )


class DeviceUnavailable(PipelineError):
    code = ERR_DEVICE_UNAVAILABLE
    retryable = True
    default_message = "No camera is available right now. Check the camera connection and try again."


class NoActiveSession(PipelineError):
    code = ERR_NO_ACTIVE_SESSION
    default_message = "The camera is not running. Start the camera before capturing an image."


class EncodingError(PipelineError):
    code = ERR_ENCODING
    default_message = "The captured image could not be encoded."


class TransportFailure(PipelineError):
    code = ERR_TRANSPORT
    retryable = True
    default_message = "Error uploading image. Please try again."


class ServiceReportedFailure(PipelineError):
    """The recognition service answered, but could not produce findings."""

    code = ERR_SERVICE
    default_message = "The recognition service could not analyze this image."

    @property
    def user_message(self) -> str:
        # the service's own wording is shown verbatim
        return self.detail or self.default_message


class SpeechRecognitionError(PipelineError):
    code = ERR_SPEECH
    default_message = "Voice recognition stopped."

    @property
    def user_message(self) -> str:
        if self.detail:
            return f"Voice recognition error ({self.detail}). Enable voice commands to try again."
        return f"{self.default_message} Enable voice commands to try again."
