class AnalysisError(Exception):
    """Base class for everything that can go wrong while analysing a label."""

class NetworkError(AnalysisError):
    """The request could not complete or the endpoint answered with an error status."""

class MalformedResponseError(AnalysisError):
    """The endpoint answered, but not with the expected text/JSON shape."""

class MissingCredentialsError(AnalysisError):
    """No API key is configured for the outbound call."""
