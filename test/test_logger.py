import logging

from pytest import fixture, raises

from flockwave.osc.logger import install


@fixture
def root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


def test_install(root_logger):
    count = len(root_logger.handlers)

    install(level=logging.DEBUG, style="plain")
    assert len(root_logger.handlers) == count + 1
    assert root_logger.level == logging.DEBUG


def test_install_twice_adds_single_handler(root_logger):
    count = len(root_logger.handlers)

    install(style="fancy")
    install(level=logging.WARN, style="plain")

    assert len(root_logger.handlers) == count + 1
    assert root_logger.level == logging.WARN
    assert not hasattr(root_logger.handlers[-1].formatter, "log_colors")


def test_install_unknown_style(root_logger):
    with raises(ValueError):
        install(style="sparkly")
