class HealthVisionError(Exception):
    """Base class for errors raised by the assistant."""


class InputValidationError(HealthVisionError):
    """Required request input is missing, too short or malformed (HTTP 400)."""


class GatewayError(HealthVisionError):
    """The language-model call could not be made or did not return text."""


class ParseError(HealthVisionError):
    """Model output could not be turned into a JSON object."""
