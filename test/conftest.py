import logging

from pytest import fixture


@fixture(autouse=True)
def _restore_root_logger():
    """Restores the handlers and level of the root logger after each test so
    that handlers installed by one test (e.g. via the CLI) do not leak into
    other tests.
    """
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
