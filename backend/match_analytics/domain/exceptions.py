"""
Domain exceptions for the prediction system.
"""

class PredictionException(Exception):
    """Base exception for prediction-related errors."""
    pass

class InvalidPredictionInputException(PredictionException):
    """Exception raised when a prediction request lacks the team identifiers it needs."""
    pass

class PredictionTimeoutException(PredictionException):
    """Exception raised when the background worker does not answer in time."""
    pass

class WorkerUnavailableException(PredictionException):
    """Exception raised when the background worker is terminated or saturated."""
    pass

class DataSourceException(Exception):
    """Exception raised when the match backend cannot answer a query."""
    pass
