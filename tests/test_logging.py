import json

import structlog

from draftsync.logging import component_name, get_logger, setup_logging


def test_json_logging_filters_by_level(capsys):
    setup_logging(json_output=True, log_level="INFO")
    try:
        logger = get_logger("draftsync.tests")
        logger.info("schedule_drafts_published", created=2, deleted=1)
        logger.debug("draft_staged", key="1-p1")
    finally:
        structlog.reset_defaults()

    lines = capsys.readouterr().out.strip().splitlines()

    assert len(lines) == 1
    record = json.loads(lines[0])
    assert record["event"] == "schedule_drafts_published"
    assert record["level"] == "info"
    assert record["created"] == 2
    assert "timestamp" in record
    assert record["component"] == "tests"


def test_component_name_strips_package_prefix():
    assert component_name("draftsync.reconciler") == "reconciler"
    assert component_name("tests.helpers") == "tests.helpers"
