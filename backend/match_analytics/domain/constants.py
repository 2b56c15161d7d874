"""
Domain Constants

This module contains constant definitions valid across the domain layer.
"""

# Tag and version carried by every locally computed prediction
BASELINE_MODEL_VERSION = "baseline-v1.0"

# Scoreline grid bound: goals 0..MAX_GOALS per side.
# Mass beyond the bound is dropped, so raw grid sums are slightly below 1.
MAX_GOALS = 6

# Sample windows
FORM_WINDOW = 5
EXPECTED_GOALS_WINDOW = 10

# Neutral defaults used when a collection is empty
NEUTRAL_FORM_INDEX = 0.5
NEUTRAL_EXPECTED_GOALS = 1.5

# Home advantage multipliers (fixed, not fitted)
HOME_ADVANTAGE_MULTIPLIER = 1.1
AWAY_DISADVANTAGE_MULTIPLIER = 0.9

# Points per result for the form index
POINTS_WIN = 3
POINTS_DRAW = 1

# Form-based adjustment of outcome probabilities.
# Calibration constant: 0.1 and 0.2 were both used historically.
FORM_SENSITIVITY = 0.2
MIN_OUTCOME_PROBABILITY = 0.05
MAX_OUTCOME_PROBABILITY = 0.9

# Over 2.5 ceiling
OVER_25_THRESHOLD = 2.5
MAX_OVER_25_PROBABILITY = 0.95

# Confidence buckets: base + capped per-sample contributions.
# The per-match rates are calibration constants.
BASE_CONFIDENCE = 0.3
H2H_CONFIDENCE_CAP = 0.3
H2H_CONFIDENCE_RATE = 0.03
HOME_CONFIDENCE_CAP = 0.2
HOME_CONFIDENCE_RATE = 0.01
AWAY_CONFIDENCE_CAP = 0.2
AWAY_CONFIDENCE_RATE = 0.01

# Key factor thresholds
STRONG_FORM_THRESHOLD = 0.7
POOR_FORM_THRESHOLD = 0.3
HIGH_SCORING_XG_THRESHOLD = 2.5
LIKELY_MARKET_THRESHOLD = 0.7
STRONG_H2H_MATCHES = 10

# League used by the remote prediction API when none is given
DEFAULT_LEAGUE = "Premier League"
