# tests/shared/test_logging_config.py
import structlog

from techfolio.shared.config import settings
from techfolio.shared.logging_config import add_service_context


class TestServiceContext:
    def test_stamps_service_and_env(self):
        event = add_service_context(None, "info", {"event": "content_created"})

        assert event["service"] == settings.OTEL_SERVICE_NAME
        assert event["env"] == settings.APP_ENV.value
        assert event["operation"] is None

    def test_keeps_bound_operation(self):
        """
        Scenario: The dispatcher bound `operation` before the line was logged.
        Expected: The merged context value survives the service processor.
        """
        with structlog.contextvars.bound_contextvars(operation="PublishContent"):
            event = structlog.contextvars.merge_contextvars(None, "info", {"event": "content_published"})
        event = add_service_context(None, "info", event)

        assert event["operation"] == "PublishContent"
