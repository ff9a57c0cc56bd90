"""Unit tests for logging configuration."""
from __future__ import annotations

import logging

from liquidator.logging_setup import configure_logging


class TestConfigureLogging:
    def test_sets_info_level(self) -> None:
        configure_logging("INFO")
        assert logging.getLogger().level == logging.INFO

    def test_sets_debug_level(self) -> None:
        configure_logging("DEBUG")
        assert logging.getLogger().level == logging.DEBUG

    def test_silences_third_party(self) -> None:
        configure_logging("DEBUG")
        assert logging.getLogger("aiohttp").level == logging.WARNING
        assert logging.getLogger("web3").level == logging.WARNING

    def test_invalid_level_defaults_to_info(self) -> None:
        configure_logging("NONEXISTENT")
        assert logging.getLogger().level == logging.INFO

    def test_handler_installed_once(self) -> None:
        configure_logging("INFO")
        configure_logging("INFO")
        ours = [
            h for h in logging.getLogger().handlers if getattr(h, "_liquidator", False)
        ]
        assert len(ours) == 1
