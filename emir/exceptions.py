"""
Custom exceptions for the EMIR card compositor
"""
from typing import Optional


class EmirError(Exception):
    """Base exception for the compositor"""
    def __init__(self, message: str, error_code: Optional[str] = None, details: Optional[dict] = None):
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)


class CardValidationError(EmirError):
    """Required card content is missing or malformed"""
    pass


class UnknownFormatError(EmirError):
    """No card format is registered under the requested name"""
    pass


class AssetLoadError(EmirError):
    """Portrait, background or logo image could not be fetched or decoded"""
    pass


class RenderError(EmirError):
    """Drawing surface could not be created or encoded"""
    pass


class AuthenticationError(EmirError):
    """API key missing or wrong"""
    pass
