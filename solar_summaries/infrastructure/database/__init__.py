"""
Database infrastructure.
"""
from .connection import Base, DatabaseManager, get_db, get_db_session, health_check, init_db

__all__ = ['Base', 'DatabaseManager', 'get_db', 'get_db_session', 'health_check', 'init_db']
