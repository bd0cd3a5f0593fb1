"""Tests for structlog configuration."""

from collections.abc import Iterator

import pytest
import structlog

from fileward.utils.logging import configure_logging


@pytest.fixture(autouse=True)
def reset_structlog() -> Iterator[None]:
    yield
    structlog.reset_defaults()


def test_info_is_filtered_at_warning(capsys: pytest.CaptureFixture[str]) -> None:
    configure_logging("WARNING")
    logger = structlog.get_logger("test")

    logger.info("batch.start", batch_id="b-1")
    logger.warning("batch.item", status="rejected")

    err = capsys.readouterr().err
    assert "batch.start" not in err
    assert "batch.item" in err
    assert "status=rejected" in err


def test_verbose_level_shows_bound_context(capsys: pytest.CaptureFixture[str]) -> None:
    configure_logging("info")
    logger = structlog.get_logger("test").bind(batch_id="b-2")

    logger.info("batch.summary", processed=3)

    err = capsys.readouterr().err
    assert "batch.summary" in err
    assert "batch_id=b-2" in err


def test_unknown_level() -> None:
    with pytest.raises(ValueError, match="Unknown log level"):
        configure_logging("LOUD")
