import logging

import pytest


@pytest.fixture
def test_logger():
    """A propagating logger so caplog sees converter events."""
    logger = logging.getLogger("movielens2crowdrec.tests")
    logger.handlers = []
    logger.propagate = True
    logger.setLevel(logging.DEBUG)
    return logger


@pytest.fixture
def write_lines(tmp_path):
    """Write `lines` to tmp_path/name (one per line) and return the path."""

    def _write(name, lines, encoding="latin-1"):
        path = tmp_path / name
        path.write_text("".join(f"{line}\n" for line in lines), encoding=encoding)
        return path

    return _write
