"""Tests for :mod:`identity.tasks`."""

import threading
from unittest import TestCase, mock

from ..tasks import BackgroundTasks


class TestBackgroundTasks(TestCase):
    """Work runs off the calling thread and can be drained."""

    def setUp(self):
        self.logger = mock.MagicMock()
        self.tasks = BackgroundTasks(max_workers=2, logger=self.logger)

    def tearDown(self):
        self.tasks.shutdown(timeout=5)

    def test_run_and_drain(self):
        """Drain waits for submitted work."""
        done = []
        release = threading.Event()

        def work(value):
            release.wait(5)
            done.append(value)

        self.tasks.run(work, 1)
        self.tasks.run(work, value=2)
        self.assertEqual(self.tasks.pending, 2)
        release.set()
        self.assertTrue(self.tasks.drain(timeout=5))
        self.assertEqual(sorted(done), [1, 2])

    def test_drain_timeout(self):
        """Drain gives up after the timeout."""
        release = threading.Event()
        self.tasks.run(release.wait, 5)
        self.assertFalse(self.tasks.drain(timeout=0.05))
        release.set()
        self.assertTrue(self.tasks.drain(timeout=5))

    def test_drain_nothing(self):
        """Draining an idle pool returns immediately."""
        self.assertTrue(self.tasks.drain(timeout=0))

    def test_errors_are_logged(self):
        """An exception in a task is logged and does not escape."""
        def broken():
            raise ValueError('nope')

        future = self.tasks.run(broken)
        self.assertTrue(self.tasks.drain(timeout=5))
        self.assertIsNone(future.exception())
        self.assertEqual(self.logger.exception.call_count, 1)

        # The pool is still usable.
        done = []
        self.tasks.run(done.append, 'ok')
        self.tasks.drain(timeout=5)
        self.assertEqual(done, ['ok'])

    def test_shutdown(self):
        """No new work is accepted after shutdown."""
        self.tasks.shutdown(timeout=5)
        with self.assertRaises(RuntimeError):
            self.tasks.run(print)
