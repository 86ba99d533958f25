# exceptions.py
class RadarViewerError(Exception):
    """Base exception for radar viewer errors"""
    pass

class FetchError(RadarViewerError):
    """Raised when a remote call fails"""
    pass

class ParseError(RadarViewerError):
    """Raised when a response does not have the expected shape"""
    pass

class ConfigurationError(RadarViewerError):
    """Raised when the configuration is unusable"""
    pass

class TransientFetchError(FetchError):
    """Raised for transport failures and 5xx responses, which are retried"""
    pass
