import os
from dotenv import load_dotenv

load_dotenv()

class Config:
    """Engine configuration settings"""
    
    # Storage settings
    STORAGE_BACKEND = os.getenv('STORAGE_BACKEND', 'memory').lower()  # "memory" or "database"
    DATABASE_URL = os.getenv('DATABASE_URL', 'sqlite:///ladder.db')
    
    # Logging settings
    DEBUG = os.getenv('DEBUG', 'False').lower() == 'true'
    LOG_DIR = os.getenv('LOG_DIR', 'logs')
    LOG_TO_FILE = os.getenv('LOG_TO_FILE', 'True').lower() == 'true'
    
    # Elo calculation settings
    STARTING_ELO = 1200
    K_FACTOR = 32
    MULTIPLAYER_PLAYER_COUNT = 4
    
    # Game catalogue seeded into an empty store (comma-separated override)
    DEFAULT_GAMES = os.getenv(
        'DEFAULT_GAMES',
        'Chess,Ping Pong,Pool,Foosball,Street Fighter,Mario Kart'
    )
    
    SUPPORTED_BACKENDS = ('memory', 'database')
    
    @classmethod
    def get_default_games(cls):
        """Get the default game catalogue as a list"""
        return [game.strip() for game in cls.DEFAULT_GAMES.split(',') if game.strip()]
    
    @classmethod
    def get_async_database_url(cls) -> str:
        """Get DATABASE_URL with the sqlite driver swapped for aiosqlite"""
        database_url = cls.DATABASE_URL
        if database_url.startswith('sqlite:///'):
            database_url = database_url.replace('sqlite:///', 'sqlite+aiosqlite:///')
        return database_url
    
    @classmethod
    def validate(cls):
        """Validate that the configuration is usable"""
        if cls.STORAGE_BACKEND not in cls.SUPPORTED_BACKENDS:
            raise ValueError(
                f"STORAGE_BACKEND must be one of {', '.join(cls.SUPPORTED_BACKENDS)}, "
                f"got '{cls.STORAGE_BACKEND}'"
            )
        if cls.STORAGE_BACKEND == 'database' and not cls.DATABASE_URL:
            raise ValueError("DATABASE_URL is required for the database backend")
        if cls.K_FACTOR <= 0:
            raise ValueError("K_FACTOR must be positive")
