"""
Match Analytics Backend

Historical match search, descriptive statistics and baseline match-outcome
predictions for a home/away team pairing.
"""

__version__ = "1.0.0"
