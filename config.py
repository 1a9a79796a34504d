import os
from decimal import Decimal
from dotenv import load_dotenv

load_dotenv()


class Config:
    """Base configuration shared across all environments."""
    # Logging
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    LOG_DIR = os.environ.get('LOG_DIR', os.path.join(os.getcwd(), 'logs'))
    LOG_TO_FILE = True
    LOG_MAX_BYTES = 5 * 1024 * 1024
    LOG_BACKUP_COUNT = 5

    # Promotion defaults (rows without sku_match_type use this)
    DEFAULT_MATCH_MODE = 'prefix'

    # Display only; the engine itself never rounds
    CURRENCY_SYMBOL = os.environ.get('CURRENCY_SYMBOL', '$')
    DISPLAY_QUANTUM = Decimal(os.environ.get('DISPLAY_QUANTUM', '0.01'))


class DevelopmentConfig(Config):
    """Development environment configuration."""
    DEBUG = True
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'DEBUG')


class ProductionConfig(Config):
    """Production environment configuration."""
    DEBUG = False
    LOG_TO_FILE = os.environ.get('LOG_TO_FILE', 'True').lower() == 'true'


class TestingConfig(Config):
    """Testing environment configuration."""
    TESTING = True
    LOG_LEVEL = 'WARNING'
    LOG_TO_FILE = False   # tests never touch the filesystem


config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}


def get_config(name=None):
    """Resolve a config class by name, falling back to PROMO_ENGINE_ENV, then 'default'."""
    name = name or os.environ.get('PROMO_ENGINE_ENV', 'default')
    return config.get(name, config['default'])
