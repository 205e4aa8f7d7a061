"""
Engine-wide constants for the rating ladder.

Values that the rating formulas and the challenge workflow depend on, kept
in one place so the operations modules never hard-code them.
"""

class EloConstants:
    """Constants related to Elo calculations."""
    
    # Logistic scale of the expected-score curve
    RATING_SCALE = 400
    
    # Actual scores for a decided pairing
    WIN_SCORE = 1.0
    LOSS_SCORE = 0.0

class MatchConstants:
    """Constants for match recording."""
    
    MATCH_TYPE_ONE_V_ONE = "1v1"
    MATCH_TYPE_MULTIPLAYER = "multiplayer"
    
    # Placement that counts as a win in a multiplayer match
    WINNING_PLACEMENT = 1

class ChallengeConstants:
    """Constants for the challenge workflow."""
    
    DECISION_ACCEPTED = "accepted"
    DECISION_DECLINED = "declined"
