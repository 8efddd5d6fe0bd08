"""
Tests for the rate-limited logging helper.
"""
from unittest.mock import MagicMock, patch

from wvm_bundler._rate_limited_log import rate_limited_log, reset_rate_limited_log


def test_repeated_message_is_suppressed():
    mock_logger = MagicMock()

    assert rate_limited_log("Test message", logger_instance=mock_logger)
    mock_logger.warning.assert_called_once_with("Test message")

    mock_logger.reset_mock()
    assert not rate_limited_log("Test message", logger_instance=mock_logger)
    mock_logger.warning.assert_not_called()


def test_level_and_message_are_keyed_separately():
    mock_logger = MagicMock()

    rate_limited_log("Test message", level="warning", logger_instance=mock_logger)
    rate_limited_log("Test message", level="error", logger_instance=mock_logger)
    rate_limited_log("Other message", level="warning", logger_instance=mock_logger)

    mock_logger.error.assert_called_once_with("Test message")
    assert mock_logger.warning.call_count == 2


def test_reset_allows_message_again():
    mock_logger = MagicMock()
    rate_limited_log("Test message", logger_instance=mock_logger)
    reset_rate_limited_log()
    rate_limited_log("Test message", logger_instance=mock_logger)
    assert mock_logger.warning.call_count == 2


def test_lock_is_acquired():
    mock_lock = MagicMock()
    with patch("wvm_bundler._rate_limited_log._log_cache_lock", mock_lock):
        rate_limited_log("Locked message", logger_instance=MagicMock())
    mock_lock.__enter__.assert_called()
