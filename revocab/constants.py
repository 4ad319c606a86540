"""
Static constants for revocab.

This module contains the fixed thresholds and layout sizes used by the
classifier, the game engines and the statistics helpers.
No runtime configuration or path defaults - pure constants only.
"""

# Items whose lifetime success rate is strictly below this value are "tough".
# Items that were never practiced have a rate of 0 and are always tough.
TOUGH_SUCCESS_RATE_THRESHOLD: float = 0.81

# Number of pairs shown on one page of the matching grid.
MATCHING_PAGE_SIZE: int = 6

# Options shown per multiple-choice question (1 correct + distractors).
MULTIPLE_CHOICE_OPTION_COUNT: int = 4

# Number of entries in the "problem words" statistics list.
PROBLEM_WORD_LIMIT: int = 10

# Session results at or above this are celebrated, below the lower one
# the user is nudged to keep practising.
PERFECT_SCORE: int = 100
LOW_SCORE_THRESHOLD: int = 50

# Display title of the synthetic Tough Mode set.
TOUGH_MODE_TITLE: str = "Tough Mode"
