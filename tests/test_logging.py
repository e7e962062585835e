import structlog
from structlog.testing import capture_logs

from progression.logging import add_engine_context, configure_logging, get_logger


def test_engine_context_is_added():
    event = add_engine_context(None, "info", {"event": "hello"})

    assert event["engine"] == "progression"


def test_configure_logging_json_output(capsys):
    configure_logging(level="WARNING", json_format=True)
    try:
        logger = get_logger("progression.test")
        logger.info("quiet")
        logger.warning("loud", ability_id="cleave")
    finally:
        structlog.reset_defaults()

    err = capsys.readouterr().err
    assert "quiet" not in err
    assert '"event": "loud"' in err
    assert '"ability_id": "cleave"' in err
    assert '"engine": "progression"' in err


def test_get_logger_is_capturable():
    with capture_logs() as logs:
        get_logger().warning("ability_unknown", ability_id="ghost")

    assert logs == [{"event": "ability_unknown", "ability_id": "ghost", "log_level": "warning"}]
