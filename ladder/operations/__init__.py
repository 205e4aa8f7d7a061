"""
Operations Layer

Business logic that composes the rating engine and repository calls into
complete workflows. Operations modules handle validation, per-record
serialization and logging, while the repository handles storage.

Architecture:
- Repository layer: storage of users, matches, challenges and games
- Operations layer: validation, rating updates and state transitions
- Caller layer: HTTP/UI marshalling (outside this package)

Each operations module focuses on a specific domain:
- PlayerOperations: user lifecycle, leaderboard and user stats
- MatchOperations: 1v1 and multiplayer match recording
- ChallengeOperations: challenge state machine
- GameOperations: game catalogue
"""
