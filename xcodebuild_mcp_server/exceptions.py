#!/usr/bin/env python3
"""Exception types shared by the server and the build engine"""


class XCodeMCPError(Exception):
    def __init__(self, message, code=None):
        self.message = message
        self.code = code
        super().__init__(self.message)


class InvalidParameterError(XCodeMCPError):
    pass


class DestinationError(InvalidParameterError):
    """Raised when a build destination cannot be resolved from the given platform options."""
    pass
