#!/usr/bin/env python3
"""
Test script for settings and the MySQL connection factory.

pymysql.connect is patched; no server is needed.
"""

import pymysql
import pytest

from datawriter.config import Settings
from datawriter.connectors import MySQLConfig, MySQLConnectionFactory
from datawriter.connectors import mysql as mysql_connector


def test_settings_read_environment(monkeypatch):
    monkeypatch.setenv("MYSQL_PORT", "3307")
    monkeypatch.setenv("datawriter_default_table", "db.other")
    monkeypatch.setenv("DATAWRITER_WRITE_INTERVAL_SECONDS", "0.5")

    s = Settings(_env_file=None)

    assert s.MYSQL_PORT == 3307
    assert s.DATAWRITER_DEFAULT_TABLE == "db.other"
    assert s.DATAWRITER_WRITE_INTERVAL_SECONDS == pytest.approx(0.5)


def test_settings_defaults(monkeypatch):
    for name in ("MYSQL_HOST", "MYSQL_PORT", "DATAWRITER_DEFAULT_TABLE"):
        monkeypatch.delenv(name, raising=False)

    s = Settings(_env_file=None)

    assert s.MYSQL_HOST == "127.0.0.1"
    assert s.DATAWRITER_DEFAULT_TABLE == "gftest.test_table_1"
    assert s.LOG_LEVEL == "INFO"


def test_connect_params_tcp():
    config = MySQLConfig(host="db", port=3310, user="u", password="p", database="gftest")

    params = config.connect_params()

    assert params["host"] == "db"
    assert params["port"] == 3310
    assert params["database"] == "gftest"
    assert params["autocommit"] is True
    assert "unix_socket" not in params


def test_connect_params_socket():
    config = MySQLConfig(unix_socket="/tmp/mysql.sock")

    params = config.connect_params()

    assert params["unix_socket"] == "/tmp/mysql.sock"
    assert "host" not in params
    assert "database" not in params


def test_factory_opens_new_connection_per_call(monkeypatch):
    calls = []

    def fake_connect(**kwargs):
        calls.append(kwargs)
        return object()

    monkeypatch.setattr(mysql_connector.pymysql, "connect", fake_connect)
    factory = MySQLConnectionFactory(MySQLConfig(host="db", port=3306))

    a = factory()
    b = factory.connect()

    assert a is not b
    assert len(calls) == 2
    assert calls[0]["host"] == "db"
    assert calls[0]["autocommit"] is True


def test_factory_propagates_connect_errors(monkeypatch):
    def fake_connect(**kwargs):
        raise pymysql.err.OperationalError(2003, "Can't connect")

    monkeypatch.setattr(mysql_connector.pymysql, "connect", fake_connect)
    factory = MySQLConnectionFactory(MySQLConfig())

    with pytest.raises(pymysql.MySQLError):
        factory()
