from config.settings import Settings, get_settings
from config.database import Database, get_database

__all__ = ['Settings', 'get_settings', 'Database', 'get_database']
