"""Database connectors."""

from datawriter.connectors.mysql import MySQLConfig, MySQLConnectionFactory

__all__ = ["MySQLConfig", "MySQLConnectionFactory"]
