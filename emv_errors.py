# Purpose: Error kinds raised while decoding EMV QR payloads.
# Every decode failure is terminal: callers get an exception, never a partial result.


class EMVError(ValueError):
    """Base class for all EMV QR decoding failures."""

    def __init__(self, message, tag=None):
        super().__init__(message)
        self.message = message
        self.tag = tag

    def qualify(self, tag):
        """Returns the same kind of error, re-worded to name the enclosing tag."""
        err = self.__class__.__new__(self.__class__)
        EMVError.__init__(err, f"error parsing field {tag}: {self.message}", tag=tag)
        for key, value in self.__dict__.items():
            if key not in ("message", "tag"):
                setattr(err, key, value)
        return err


class TooShort(EMVError):
    pass


class MalformedLength(EMVError):
    pass


class TruncatedValue(EMVError):
    pass


class UnsupportedGrammar(EMVError):
    pass


class CRCValidationFailed(EMVError):
    def __init__(self, expected, actual, message=None):
        if message is None:
            message = f"invalid CRC: expected {expected}, got {actual}"
        super().__init__(message)
        self.expected = expected
        self.actual = actual
