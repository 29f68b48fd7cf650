"""Error taxonomy shared by the server and the client orchestrator."""


class ConverterError(Exception):
    """Base class for all converter errors."""


class ValidationError(ConverterError):
    """User-correctable request problem (missing file, bad format). Maps to HTTP 400."""


class UnsupportedFormatError(ValidationError):
    def __init__(self, value):
        self.value = value
        super().__init__(f"Unsupported target format: {value!r}")


class ConversionError(ConverterError):
    """The codec could not decode or re-encode the image."""


class TransportError(ConverterError):
    """Network or HTTP failure while talking to the converter API."""
