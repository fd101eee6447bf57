# medshop_inventory/db/connection.py
import os
import urllib.parse
from typing import Dict, Any, Literal

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from supabase import create_client, Client

from medshop_inventory.config import config
from medshop_inventory.exceptions import DatabaseError, ConfigError
from medshop_inventory.models import Base

DatabaseType = Literal["postgresql", "supabase"]

class DatabaseConfig:
    """Configuration for database connections."""

    @staticmethod
    def get_db_type() -> DatabaseType:
        """Get database type from configuration."""
        db_type = config.get('DATABASE', 'type', default='supabase').lower()
        # Remove any comments from the value
        db_type = db_type.split('#')[0].strip()
        return db_type

    @staticmethod
    def get_postgresql_config() -> Dict[str, Any]:
        """Get PostgreSQL connection configuration."""
        return {
            'pool_size': config.get_int('DATABASE', 'pool_size', default=5),
            'max_overflow': config.get_int('DATABASE', 'max_overflow', default=10),
            'pool_timeout': config.get_int('DATABASE', 'pool_timeout', default=30),
            'pool_recycle': config.get_int('DATABASE', 'pool_recycle', default=1800),
            'echo': config.get_boolean('DATABASE', 'echo', default=False)
        }

    @staticmethod
    def get_supabase_config() -> Dict[str, str]:
        """Get Supabase connection configuration."""
        # Try environment variables first
        url = os.getenv('SUPABASE_URL')
        key = os.getenv('SUPABASE_KEY') or os.getenv('SUPABASE_ANON_KEY')
        if url and key:
            return {'url': url, 'key': key}

        # Fall back to config file
        return {
            'url': config.get('SUPABASE', 'url', default=''),
            'key': config.get('SUPABASE', 'key', default='')
        }

    @staticmethod
    def get_connection_string() -> str:
        """Get SQLAlchemy connection string with the password URL-encoded."""
        url = config.get('DATABASE', 'url', default='')
        if url:
            return url

        password = urllib.parse.quote_plus(config.get('DATABASE', 'password', default='postgres'))
        return (
            f"{config.get('DATABASE', 'engine', default='postgresql')}://"
            f"{config.get('DATABASE', 'username', default='postgres')}:{password}"
            f"@{config.get('DATABASE', 'host', default='localhost')}:"
            f"{config.get('DATABASE', 'port', default='5432')}/"
            f"{config.get('DATABASE', 'database', default='medshop')}"
        )

class DatabaseConnection:
    """Unified database connection handler for PostgreSQL and Supabase.

    The connection is opened on first use rather than at import time.
    """

    _instance = None
    _engine = None
    _session_factory = None
    _supabase = None
    _db_type: DatabaseType = None

    def __new__(cls):
        """Ensure singleton pattern."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def initialize(self):
        """Initialize the database connection based on type."""
        if self._db_type is not None:
            return

        db_type = DatabaseConfig.get_db_type()

        if db_type == "supabase":
            self._initialize_supabase()
        elif db_type == "postgresql":
            self._initialize_postgresql()
        else:
            raise ConfigError(f"Unknown database type: {db_type}")

        self._db_type = db_type

    def _initialize_postgresql(self):
        """Initialize SQLAlchemy engine and session factory."""
        connection_string = DatabaseConfig.get_connection_string()
        pg_config = DatabaseConfig.get_postgresql_config()

        engine_options = {'echo': pg_config['echo']}
        if not connection_string.startswith('sqlite'):
            engine_options.update(
                pool_size=pg_config['pool_size'],
                max_overflow=pg_config['max_overflow'],
                pool_timeout=pg_config['pool_timeout'],
                pool_recycle=pg_config['pool_recycle']
            )

        try:
            self._engine = create_engine(connection_string, **engine_options)
            self._session_factory = sessionmaker(
                autocommit=False,
                autoflush=False,
                expire_on_commit=False,
                bind=self._engine
            )
        except Exception as e:
            raise DatabaseError(f"Failed to initialize SQL connection: {str(e)}") from e

    def _initialize_supabase(self):
        """Initialize Supabase client."""
        supabase_config = DatabaseConfig.get_supabase_config()

        if not supabase_config['url'] or not supabase_config['key']:
            raise ConfigError(
                "Supabase URL and key must be provided (SUPABASE_URL/SUPABASE_KEY or [SUPABASE] in settings.ini)"
            )

        try:
            self._supabase = create_client(supabase_config['url'], supabase_config['key'])
        except Exception as e:
            raise DatabaseError(f"Failed to initialize Supabase connection: {str(e)}") from e

    def create_all_tables(self):
        """Create all tables (SQL databases only)."""
        Base.metadata.create_all(bind=self.engine)

    def drop_all_tables(self):
        """Drop all tables (SQL databases only)."""
        Base.metadata.drop_all(bind=self.engine)

    @property
    def session_factory(self):
        """Get the session factory (SQL databases only)."""
        self.initialize()
        if self._db_type != "postgresql":
            raise DatabaseError("session_factory is only available for SQL connections")
        return self._session_factory

    @property
    def engine(self):
        """Get SQLAlchemy engine (SQL databases only)."""
        self.initialize()
        if self._db_type != "postgresql":
            raise DatabaseError("engine is only available for SQL connections")
        return self._engine

    def get_supabase(self) -> Client:
        """Get Supabase client (Supabase only)."""
        self.initialize()
        if self._db_type != "supabase":
            raise DatabaseError("get_supabase is only available for Supabase connections")
        return self._supabase

    @property
    def db_type(self) -> DatabaseType:
        """Get current database type."""
        self.initialize()
        return self._db_type

# Singleton instance
db = DatabaseConnection()
