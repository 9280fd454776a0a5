"""Tests for logging configuration and the events sqlguard emits."""

from __future__ import annotations

import json
import logging
from typing import Any

import pytest
import structlog
from sqlguard import CheckedResult, checked_scope, configure_logging, get_logger

from tests.conftest import FakeSource


class TestConfigureLogging:
    """Tests for configure_logging()."""

    def test_json_output(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Events render as one JSON object per line on stderr."""
        configure_logging(level='INFO', json_output=True)
        get_logger('sqlguard.tests').info('hen_counted', count=2)

        line = capsys.readouterr().err.strip().splitlines()[-1]
        entry = json.loads(line)
        assert entry['event'] == 'hen_counted'
        assert entry['count'] == 2
        assert entry['level'] == 'info'
        assert entry['logger'] == 'sqlguard.tests'
        assert 'timestamp' in entry

    def test_level_filters_events(self, capsys: pytest.CaptureFixture[str]) -> None:
        configure_logging(level='WARNING', json_output=True)
        get_logger('sqlguard.tests').info('too_quiet')
        assert 'too_quiet' not in capsys.readouterr().err

    def test_stdlib_records_share_the_format(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Foreign stdlib records go through the same renderer."""
        configure_logging(level='INFO', json_output=True)
        logging.getLogger('sqlguard.stdlib').warning('plain %s', 'record')

        entry = json.loads(capsys.readouterr().err.strip().splitlines()[-1])
        assert entry['event'] == 'plain record'
        assert entry['level'] == 'warning'

    def test_console_output(self, capsys: pytest.CaptureFixture[str]) -> None:
        configure_logging(level='INFO', json_output=False)
        get_logger('sqlguard.tests').info('hen_counted')
        assert 'hen_counted' in capsys.readouterr().err

    def test_reconfigure_replaces_handler(self) -> None:
        """Calling configure_logging twice installs a single handler."""
        configure_logging(level='INFO')
        configure_logging(level='DEBUG')

        root = logging.getLogger()
        assert root.level == logging.DEBUG
        ours = [h for h in root.handlers if isinstance(h.formatter, structlog.stdlib.ProcessorFormatter)]
        assert len(ours) == 1


class TestGuardEvents:
    """Suppressed errors are reported with their status fields."""

    def test_suppressed_error_is_logged(self, log_events: list[dict[str, Any]]) -> None:
        with pytest.raises(ValueError, match='original'):
            with checked_scope():
                CheckedResult.from_command(6, FakeSource('database table is locked'))
                raise ValueError('original')

        events = [e for e in log_events if e['event'] == 'unchecked_result_suppressed']
        assert len(events) == 1
        assert events[0]['code'] == 6
        assert events[0]['message'] == 'database table is locked'
        assert events[0]['in_flight'] == 'ValueError'
        assert events[0]['log_level'] == 'error'

    def test_observed_error_is_not_logged(self, log_events: list[dict[str, Any]]) -> None:
        with pytest.raises(ValueError):
            with checked_scope():
                CheckedResult.from_command(6, FakeSource()).error()
                raise ValueError('original')

        assert not [e for e in log_events if e['event'].startswith('unchecked_result')]
