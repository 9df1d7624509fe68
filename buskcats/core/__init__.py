"""
busk-cats Core
==============

Configuration, storage helpers, errors and logging shared by every module.
"""

from .config import Config, Settings
from .database import Database
from .logging_service import LoggingService, db_log, db_logger

__all__ = ['Config', 'Settings', 'Database', 'LoggingService', 'db_log', 'db_logger']
