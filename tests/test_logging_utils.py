import io
import logging

from stepwise.logging_utils import configure_logging, level_for_verbosity


def test_level_for_verbosity():
    assert level_for_verbosity(0) == logging.WARNING
    assert level_for_verbosity(1) == logging.INFO
    assert level_for_verbosity(2) == logging.DEBUG
    assert level_for_verbosity(5) == logging.DEBUG


def test_configure_logging_scopes_to_package_logger():
    root_handlers = list(logging.getLogger().handlers)
    stream = io.StringIO()

    logger = configure_logging(verbosity=1, stream=stream)
    logging.getLogger("stepwise.branches").info("Setting part-1.1")
    logging.getLogger("stepwise.branches").debug("hidden")

    assert logger.name == "stepwise"
    assert logging.getLogger().handlers == root_handlers
    assert stream.getvalue() == "INFO stepwise.branches: Setting part-1.1\n"


def test_configure_logging_twice_keeps_one_handler():
    configure_logging(verbosity=0, stream=io.StringIO())
    stream = io.StringIO()
    logger = configure_logging(verbosity=2, stream=stream)

    logging.getLogger("stepwise.git_adapter").debug("Running git command: git log")

    cli_handlers = [h for h in logger.handlers if h.get_name() == "stepwise-cli"]
    assert len(cli_handlers) == 1
    assert "DEBUG stepwise.git_adapter: Running git command: git log" in stream.getvalue()
