"""Tests for SqlUserRepository against an in-memory SQLite database."""

import threading
import unittest
import sys
from pathlib import Path
from unittest.mock import patch

sys.path.insert(0, str(Path(__file__).parent.parent.parent.parent))

from sqlalchemy import inspect

from adapter.sql import USERS_TABLE_NAME
from adapter.sql.connection import Database
from adapter.sql.user_repository import SqlUserRepository
from domain.model.errors import ConflictError
from port.tests.user_repository_contract import UserRepositoryContract


class TestSqlUserRepository(UserRepositoryContract, unittest.TestCase):
    """Tests that SqlUserRepository correctly implements UserRepository Protocol."""

    def setUp(self):
        self.db = Database()
        self.db.init()
        self.repo = SqlUserRepository(self.db)

    def tearDown(self):
        self.db.close()

    def test_email_column_has_unique_constraint(self):
        inspector = inspect(self.db.engine)
        unique_columns = [
            index['column_names'] for index in inspector.get_indexes(USERS_TABLE_NAME) if index['unique']
        ]
        unique_columns += [
            constraint['column_names'] for constraint in inspector.get_unique_constraints(USERS_TABLE_NAME)
        ]

        self.assertIn(['email'], unique_columns)

    def test_unique_constraint_is_the_final_guard(self):
        """A duplicate that slips past a pre-check still fails at the storage layer."""
        self.repo.create(email='ann@example.com', name='Ann', password_hash='h')

        with patch.object(SqlUserRepository, 'get_by_email', return_value=None):
            with self.assertRaises(ConflictError):
                self.repo.create(email='ann@example.com', name='Ann Two', password_hash='h')

    def test_concurrent_creates_with_same_email(self):
        results = []

        def attempt(i):
            try:
                self.repo.create(email='race@example.com', name=f'Racer {i}', password_hash='h')
                results.append('created')
            except ConflictError:
                results.append('conflict')

        threads = [threading.Thread(target=attempt, args=(i,)) for i in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        self.assertEqual(results.count('created'), 1)
        self.assertEqual(results.count('conflict'), 7)
        self.assertEqual(len(self.repo.list_all()), 1)

    def test_stores_are_isolated(self):
        other = Database()
        other.init()
        try:
            self.repo.create(email='ann@example.com', name='Ann', password_hash='h')
            self.assertEqual(SqlUserRepository(other).list_all(), [])
        finally:
            other.close()


if __name__ == '__main__':
    unittest.main()
