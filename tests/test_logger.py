import logging

from jsonrpc_http.logger import BoundLogger, create_logger


class RecordingLogger:
    def __init__(self) -> None:
        self.records: list[tuple[int, str]] = []

    def log(self, level: int, msg: str, *args) -> None:
        self.records.append((level, msg % args if args else msg))


def test_messages_below_level_are_dropped() -> None:
    sink = RecordingLogger()
    logger = create_logger(logger=sink, level="warn")
    logger.debug("hidden")
    logger.warn("shown %d", 1)
    assert sink.records == [(logging.WARNING, "shown 1")]


def test_bound_fields_prefix_messages_and_survive_child() -> None:
    sink = RecordingLogger()
    logger = create_logger(logger=sink, level="trace").bind(request=3).child("dispatch")
    logger.trace("POST %s", "/rpc")
    assert sink.records == [(5, "[request=3] POST /rpc")]


def test_create_logger_reuses_bound_logger() -> None:
    bound = BoundLogger(RecordingLogger())
    assert create_logger(logger=bound) is bound


def test_failing_sink_never_raises() -> None:
    class Exploding:
        def log(self, *args, **kwargs):
            raise RuntimeError("disk full")

    create_logger(logger=Exploding()).error("still fine")
