"""Tests for logging configuration."""

import logging

from netsweep.core.logging import add_context, add_timestamp, configure_logging, get_logger


class TestProcessors:
    """Tests for custom structlog processors."""
    
    def test_add_context_sets_service(self):
        event = add_context(None, "info", {"event": "x"})
        assert event["service"] == "netsweep"
    
    def test_add_context_keeps_existing_service(self):
        event = add_context(None, "info", {"event": "x", "service": "other"})
        assert event["service"] == "other"
    
    def test_add_timestamp(self):
        event = add_timestamp(None, "info", {"event": "x"})
        assert event["timestamp"].endswith("+00:00")


class TestConfigureLogging:
    """Tests for configure_logging."""
    
    def test_repeated_calls_do_not_stack_handlers(self, tmp_path):
        root = logging.getLogger()
        before = len(root.handlers)
        
        configure_logging(level="DEBUG")
        configure_logging(level="INFO", json_format=True, log_file=str(tmp_path / "netsweep.log"))
        
        ours = [h for h in root.handlers if getattr(h, "_netsweep", False)]
        assert len(ours) == 2
        assert root.level == logging.INFO
        assert len(root.handlers) == before + 2
        
        configure_logging(level="WARNING")
    
    def test_json_output_written_to_file(self, tmp_path):
        log_file = tmp_path / "netsweep.log"
        configure_logging(level="INFO", json_format=True, log_file=str(log_file))
        
        get_logger("netsweep.test").info("target_resolved", target="10.0.0.1")
        
        content = log_file.read_text()
        assert '"event": "target_resolved"' in content
        assert '"target": "10.0.0.1"' in content
        configure_logging(level="WARNING")
