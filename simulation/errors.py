"""
Error taxonomy for Touchline.

ConfigurationError: malformed world-generation parameters (fatal at startup).
IllegalIntent: an intent dispatched from a phase or actor that forbids it.
InvariantViolation: an internal inconsistency; a programming defect, never caught.

Business-rule rejections (offer too low, insufficient funds) are not errors;
they come back as TransferResult(success=False).
"""


class ConfigurationError(ValueError):
    pass


class IllegalIntent(Exception):
    """Raised by intent handlers; the reducer turns it into an intent_error slot."""

    def __init__(self, intent_type: str, reason: str):
        super().__init__(f"{intent_type}: {reason}")
        self.intent_type = intent_type
        self.reason = reason


class InvariantViolation(AssertionError):
    pass
