import logging

from maf_survgroup.logging_utils import configure_logging


def test_configure_logging_writes_file(tmp_path):
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    log_file = tmp_path / "logs" / "run.log"
    try:
        configure_logging(level="DEBUG", log_file=log_file)
        configure_logging(level="DEBUG", log_file=log_file)
        assert len(root.handlers) == 2
        logging.getLogger("maf_survgroup.test").info("hello %s", "world")
        for h in root.handlers:
            h.flush()
        text = log_file.read_text(encoding="utf-8")
        assert "| INFO | maf_survgroup.test | hello world" in text
    finally:
        for h in list(root.handlers):
            root.removeHandler(h)
            h.close()
        for h in saved_handlers:
            root.addHandler(h)
        root.setLevel(saved_level)
        logging.captureWarnings(False)
