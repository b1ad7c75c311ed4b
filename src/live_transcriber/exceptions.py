"""Custom exceptions for the live-transcriber service."""


class LiveTranscriberError(Exception):
    """Base class for all service errors."""


class FatalPipelineError(LiveTranscriberError):
    """Base class for errors that terminate a pipeline run."""


class ConfigurationError(FatalPipelineError):
    """Raised when required configuration is absent or invalid."""

    def __init__(self, fields: list[str], cause: Exception | None = None):
        self.fields = fields
        self.cause = cause
        super().__init__(
            f"Missing or invalid configuration: {', '.join(fields) or 'unknown'}"
        )


class ClientInitError(FatalPipelineError):
    """Raised when a remote client or the audio decoder cannot be constructed."""

    def __init__(self, client_name: str, cause: Exception | None = None):
        self.client_name = client_name
        self.cause = cause
        super().__init__(f"Failed to initialize client '{client_name}'")


class StreamSetupError(FatalPipelineError):
    """Raised when the recognition stream cannot be established."""

    def __init__(self, language_code: str, cause: Exception | None = None):
        self.language_code = language_code
        self.cause = cause
        super().__init__(
            f"Failed to start transcription stream for language '{language_code}'"
        )


class StreamTransportError(FatalPipelineError):
    """Raised when an established recognition stream fails."""

    def __init__(self, cause: Exception | None = None):
        self.cause = cause
        super().__init__(f"Transcription stream failed: {cause}")


class TranslationError(LiveTranscriberError):
    """Raised when a translation call fails."""

    def __init__(
        self,
        source_language: str,
        target_language: str,
        cause: Exception | None = None,
    ):
        self.source_language = source_language
        self.target_language = target_language
        self.cause = cause
        super().__init__(
            f"Failed to translate from '{source_language}' to '{target_language}'"
        )


class DeliveryError(LiveTranscriberError):
    """Raised when a live update, metadata or persistence call fails."""

    def __init__(self, destination: str, cause: Exception | None = None):
        self.destination = destination
        self.cause = cause
        super().__init__(f"Failed to deliver to '{destination}'")


class ExpectedInactiveDestinationError(DeliveryError):
    """Raised when the destination is not currently active (e.g. not broadcasting)."""


class EventPublishError(LiveTranscriberError):
    """Raised when publishing an event to the message broker fails."""

    def __init__(self, routing_key: str, cause: Exception | None = None):
        self.routing_key = routing_key
        self.cause = cause
        super().__init__(f"Failed to publish event with routing key '{routing_key}'")
