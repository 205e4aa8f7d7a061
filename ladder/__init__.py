"""
Rating ladder: per-game Elo standings, four-player placement ratings and
a challenge-to-match workflow.
"""
