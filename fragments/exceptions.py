"""Custom exception classes for the Fragments service."""


class FragmentsException(Exception):
    """
    Base exception class for all fragment-related errors.
    """
    pass


class ValidationError(FragmentsException):
    """
    Raised when caller-supplied fields are missing or malformed
    (empty owner, empty type, negative size, empty payload).
    """
    pass


class UnsupportedMediaTypeError(ValidationError):
    """
    Raised when a declared type is not supported, or when a payload
    fails the structural check for its declared type.
    """
    pass


class TypeImmutableError(FragmentsException):
    """
    Raised when an update attempts to change a fragment's type.
    """
    pass


class FragmentNotFoundError(FragmentsException):
    """
    Raised when no fragment matches the (owner_id, fragment_id) pair.
    """
    pass


class ConversionNotSupportedError(FragmentsException):
    """
    Raised when the requested output type is not in the native type's
    list of convertible formats.
    """

    def __init__(self, native_type: str, formats):
        self.native_type = native_type
        self.formats = list(formats)
        super().__init__(f"{native_type} can only be converted into {','.join(self.formats)}")


class ConversionNotImplementedError(FragmentsException):
    """
    Raised when a conversion is allowed by the type registry but no
    transform exists for the pair.
    """
    pass


class StorageError(FragmentsException):
    """
    Raised when a storage backend call fails.
    """
    pass


class InvalidCredentialsError(FragmentsException):
    """
    Raised when Basic authentication credentials are invalid.
    """
    pass


class ConfigurationError(FragmentsException):
    """
    Raised when the service is misconfigured (unknown backend, missing htpasswd file).
    """
    pass
