import logging

_TRANSPORT_LOGGERS = ("httpx", "httpcore")


def configure_logging(log_level: str) -> None:
    """Configure process-wide logging for the conversation client.

    httpx logs every request at INFO; transport loggers stay at WARNING unless DEBUG is requested.
    """

    level = getattr(logging, log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    transport_level = logging.DEBUG if level <= logging.DEBUG else logging.WARNING
    for name in _TRANSPORT_LOGGERS:
        logging.getLogger(name).setLevel(transport_level)
