import logging

from catalog_admin.core.logging import add_to_log_context, clear_log_context, get_log_context, get_logging_config
from catalog_admin.core.logging.filters import ContextFilter, NoiseReductionFilter


def make_record(message: str, name: str = "catalog_admin.tests") -> logging.LogRecord:
    return logging.LogRecord(name, logging.INFO, __file__, 1, message, None, None)


class TestLogContext:
    """Test cases for the contextvar log context"""

    def teardown_method(self):
        clear_log_context()

    def test_context_is_scoped(self):
        with add_to_log_context(category_id="gid://catalog-admin/Category/abc"):
            with add_to_log_context(operation="delete"):
                assert get_log_context() == {
                    "category_id": "gid://catalog-admin/Category/abc",
                    "operation": "delete",
                }
            assert get_log_context() == {"category_id": "gid://catalog-admin/Category/abc"}

        assert get_log_context() == {}

    def test_context_filter_copies_context_onto_records(self):
        record = make_record("moving subtree")

        with add_to_log_context(category_id="abc"):
            assert ContextFilter().filter(record) is True

        assert record.category_id == "abc"
        assert record.hostname
        assert record.process_id


class TestNoiseReductionFilter:
    """Test cases for NoiseReductionFilter"""

    def test_suppressed_patterns_and_loggers(self):
        noise_filter = NoiseReductionFilter(suppress_patterns=["SELECT 1"], suppress_loggers=["noisy"])

        assert noise_filter.filter(make_record("health check SELECT 1")) is False
        assert noise_filter.filter(make_record("anything", name="noisy")) is False
        assert noise_filter.filter(make_record("created category")) is True


class TestLoggingConfig:
    """Test cases for get_logging_config"""

    def test_application_loggers_use_configured_handlers(self):
        config = get_logging_config()

        app_logger = config["loggers"]["catalog_admin"]
        assert app_logger["propagate"] is False
        assert app_logger["handlers"] == list(config["handlers"])
        assert set(config["root"]["handlers"]) == set(config["handlers"])

        for handler in config["handlers"].values():
            assert handler["formatter"] in config["formatters"]
            assert set(handler["filters"]) <= set(config["filters"])
