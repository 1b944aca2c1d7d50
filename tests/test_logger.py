import logging

from docker_modem.logger import BoundLogger, create_logger, level_from_env


class ListLogger:
    """Duck-typed logger without a ``log`` method."""

    def __init__(self) -> None:
        self.records: list[tuple[str, str]] = []

    def debug(self, msg: str, *args) -> None:
        self.records.append(("debug", msg % args))

    def info(self, msg: str, *args) -> None:
        self.records.append(("info", msg % args))

    def warn(self, msg: str, *args) -> None:
        self.records.append(("warn", msg % args))

    def error(self, msg: str, *args) -> None:
        self.records.append(("error", msg % args))


def test_level_filters_messages() -> None:
    sink = ListLogger()
    logger = BoundLogger(sink, level="warn")
    logger.info("hidden")
    logger.warn("shown %d", 1)
    assert sink.records == [("warn", "shown 1")]


def test_bind_prefixes_fields_and_skips_none() -> None:
    sink = ListLogger()
    logger = BoundLogger(sink, level="debug").bind(call="GET /_ping", container=None)
    logger.debug("status=%d", 200)
    assert sink.records == [("debug", "[call=GET /_ping] status=200")]


def test_child_keeps_bound_fields(caplog) -> None:
    base = logging.getLogger("docker_modem.tests")
    logger = BoundLogger(base, level="info").bind(call="POST /exec/e1/start").child("stream")
    with caplog.at_level(logging.INFO, logger="docker_modem.tests"):
        logger.info("closing")
    assert caplog.records[0].name == "docker_modem.tests.stream"
    assert caplog.records[0].getMessage() == "[call=POST /exec/e1/start] closing"


def test_level_from_env(monkeypatch) -> None:
    monkeypatch.setenv("DOCKER_MODEM_LOG_LEVEL", "WARNING")
    assert level_from_env() == "warn"
    monkeypatch.setenv("DOCKER_MODEM_LOG_LEVEL", "loud")
    assert level_from_env("error") == "error"


def test_create_logger_reuses_bound_logger() -> None:
    logger = BoundLogger(ListLogger())
    assert create_logger(logger=logger) is logger
