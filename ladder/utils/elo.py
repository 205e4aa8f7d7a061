import math

from ladder.config import Config
from ladder.constants import EloConstants

def round_half_away_from_zero(value: float) -> int:
    """
    Round to the nearest integer, ties going away from zero
    
    Python's round() uses banker's rounding, so 2.5 would become 2.
    Rating arithmetic rounds 2.5 to 3 and -2.5 to -3.
    """
    return int(math.copysign(math.floor(abs(value) + 0.5), value))

class EloCalculator:
    """Handles Elo rating calculations for the ladder"""
    
    @staticmethod
    def calculate_expected_score(rating_a: float, rating_b: float) -> float:
        """
        Calculate the expected score for player A against player B
        
        Args:
            rating_a: Player A's current Elo rating
            rating_b: Player B's current Elo rating
            
        Returns:
            Expected score (0.0 to 1.0) for player A
        """
        return 1 / (1 + math.pow(10, (rating_b - rating_a) / EloConstants.RATING_SCALE))
    
    @staticmethod
    def get_k_factor() -> int:
        """Get the K-factor used for every match"""
        return Config.K_FACTOR
    
    @staticmethod
    def calculate_new_rating(current_rating: int, expected_score: float, actual_score: float) -> int:
        """
        Calculate a player's new rating after a single pairing
        
        Args:
            current_rating: Player's rating before the match
            expected_score: Expected score against the opponent
            actual_score: Actual score (1.0 for win, 0.0 for loss)
            
        Returns:
            New rating, rounded half away from zero
        """
        k_factor = EloCalculator.get_k_factor()
        return round_half_away_from_zero(current_rating + k_factor * (actual_score - expected_score))
    
    @staticmethod
    def calculate_placement_change(average_actual: float, average_expected: float) -> int:
        """
        Calculate the rating change for a placement-based match
        
        Args:
            average_actual: Mean actual score against every other participant
            average_expected: Mean expected score against every other participant
            
        Returns:
            Rating change (can be positive or negative)
        """
        k_factor = EloCalculator.get_k_factor()
        return round_half_away_from_zero(k_factor * (average_actual - average_expected))
    
    @staticmethod
    def format_elo_change(elo_change: int) -> str:
        """
        Format Elo change for display
        
        Args:
            elo_change: The Elo change value
            
        Returns:
            Formatted string with an explicit sign
        """
        if elo_change > 0:
            return f"+{elo_change}"
        elif elo_change < 0:
            return str(elo_change)
        else:
            return "±0"
