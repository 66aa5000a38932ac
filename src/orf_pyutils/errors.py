from collections.abc import Sequence


class OrfError(Exception):
    """Root class for all distinguished errors raised at the engine's boundaries.

    The scoring core itself is total over its inputs; these errors are raised
    only while decoding collaborator payloads, records and configuration.

    Args:
        msg: Error message
        retryable: Whether the operation that caused this error can be retried
    """

    def __init__(self, *, msg: str, retryable: bool = True) -> None:
        super().__init__(msg)
        self._retryable = retryable

    @property
    def retryable(self) -> bool:
        """Whether this error indicates a retryable operation."""
        return self._retryable


class WrappedExceptionError(OrfError):
    """Base class for errors that wrap other exceptions.

    Args:
        exception: The exception being wrapped
        retryable: Whether the operation that caused this error can be retried
    """

    def __init__(self, *, exception: Exception, retryable: bool = True) -> None:
        super().__init__(msg=f"{type(self).__name__}: {exception}", retryable=retryable)
        self._details = exception

    @property
    def details(self) -> Exception:
        """The wrapped exception."""
        return self._details


class PayloadValidationError(WrappedExceptionError):
    """A collaborator payload (OCR words, speech words, record) failed validation.

    Args:
        exception: The underlying validation or decoding exception
        source: Short name of the payload being decoded
    """

    def __init__(self, *, exception: Exception, source: str) -> None:
        super().__init__(exception=exception, retryable=False)
        self._source = source

    @property
    def source(self) -> str:
        return self._source


class UnsupportedSchemaVersionError(OrfError):
    """Error for persisted records written with an unknown schema version.

    Args:
        version: The version found in the record
        supported_versions: Versions this library can read
    """

    def __init__(self, *, version: object, supported_versions: Sequence[int]) -> None:
        supported = ", ".join(str(v) for v in supported_versions)
        super().__init__(
            msg=f"Unsupported record schema version {version!r} (supported are {supported})",
            retryable=False,
        )


class ConfigurationError(OrfError):
    """Error for invalid or unreadable configuration.

    Args:
        reason: What was wrong with the configuration
    """

    def __init__(self, *, reason: str) -> None:
        super().__init__(msg=f"Invalid configuration: {reason}", retryable=False)
