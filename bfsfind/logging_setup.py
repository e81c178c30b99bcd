import logging
import sys
import structlog

def _drop_main_thread_name(_, __, event_dict):
    # only walker threads are worth naming; the CLI runs on MainThread.
    if event_dict.get("thread_name") == "MainThread":
        del event_dict["thread_name"]
    return event_dict

def configure_logging(log_level_str: str = "warning", force_json_logs: bool = False):
    """
    Structured logging on stderr for the "bfsfind" logger tree, console or
    JSON rendered. Events from a walker thread carry its thread name plus
    the search root it was bound to (see walker.run).
    """
    log_level = getattr(logging, log_level_str.upper(), logging.WARNING)

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.CallsiteParameterAdder([structlog.processors.CallsiteParameter.THREAD_NAME]),
        _drop_main_thread_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.format_exc_info,
        structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
    ]

    structlog.configure(
        processors=shared_processors,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    if force_json_logs:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    formatter = structlog.stdlib.ProcessorFormatter(
        processor=renderer,
        foreign_pre_chain=[structlog.stdlib.add_log_level],
    )

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)

    package_logger = logging.getLogger("bfsfind")
    package_logger.handlers.clear()
    package_logger.addHandler(handler)
    package_logger.setLevel(log_level)

    structlog.get_logger(__name__).info("logging_configured", level=log_level_str, json=force_json_logs)
