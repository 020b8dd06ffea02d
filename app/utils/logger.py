import logging
import os
import sys
from types import FrameType

from loguru import logger
from opentelemetry._logs import set_logger_provider
from opentelemetry.exporter.otlp.proto.grpc._log_exporter import OTLPLogExporter
from opentelemetry.sdk._logs import LoggerProvider, LoggingHandler
from opentelemetry.sdk._logs.export import BatchLogRecordProcessor
from opentelemetry.sdk.resources import Resource

from app.core.config import get_settings

# Third-party loggers whose own handlers are replaced by the loguru bridge
THIRD_PARTY_LOGGERS = (
    "uvicorn",
    "uvicorn.error",
    "uvicorn.access",
    "gunicorn.error",
    "gunicorn.access",
    "fastapi",
    "httpx",
    "httpcore",
)


class InterceptHandler(logging.Handler):
    """
    Forwards standard library log records to Loguru.
    Records emitted by OpenTelemetry itself are dropped to avoid a feedback loop
    through the OTLP sink.
    """

    def emit(self, record: logging.LogRecord) -> None:
        if record.name.startswith("opentelemetry"):
            return

        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Walk out of the logging module so Loguru reports the real caller
        frame: FrameType | None = logging.currentframe()
        depth = 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(
            level, record.getMessage()
        )


def _add_otlp_sink(endpoint: str, level: str) -> None:
    resource = Resource.create(
        {
            "service.name": os.getenv("OTEL_SERVICE_NAME", "admin-console"),
            "deployment.environment": get_settings().ENVIRONMENT,
        }
    )
    logger_provider = LoggerProvider(resource=resource)
    set_logger_provider(logger_provider)

    insecure = os.getenv("OTEL_EXPORTER_OTLP_INSECURE", "false").lower() == "true"
    exporter = OTLPLogExporter(endpoint=endpoint, insecure=insecure)
    logger_provider.add_log_record_processor(BatchLogRecordProcessor(exporter))

    otel_handler = LoggingHandler(level=level, logger_provider=logger_provider)
    logger.add(otel_handler, level=level, serialize=True)


def setup_logging():
    """
    Route every log record of the process through Loguru.

    The root logger and the server/HTTP client loggers are rebound to an
    InterceptHandler; Loguru writes to stderr and, when
    OTEL_EXPORTER_OTLP_ENDPOINT is set, to an OTLP log exporter as well.

    Returns:
        The configured Loguru logger.
    """
    level = get_settings().LOG_LEVEL.upper()

    logging.root.handlers = [InterceptHandler()]
    logging.root.setLevel(level)

    for name in THIRD_PARTY_LOGGERS:
        log = logging.getLogger(name)
        log.handlers = [InterceptHandler()]
        log.propagate = False

    logger.remove()
    logger.add(
        sys.stderr,
        level=level,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> <level>{level}</level>: <cyan>[{name}:{line}]</cyan> - <level>{message}</level>",
        colorize=True,
        enqueue=True,
    )

    endpoint = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT")
    if endpoint:
        try:
            _add_otlp_sink(endpoint, level)
            logger.info("Logging (Loguru Sink) Active.")
        except Exception as e:
            # Console logging keeps working without the OTLP sink
            print(f"Log Setup Failed: {e}", file=sys.stderr)

    return logger
