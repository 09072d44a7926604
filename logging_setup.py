import logging
import sys

_HANDLER_NAME = "task_tracker.console"


def setup_logging(level: str = "INFO") -> None:
    """
    Attach a stderr handler to the root logger.

    Calling it again replaces the handler installed by a previous call and
    leaves any other handlers alone.
    """
    root = logging.getLogger()
    root.setLevel(level)

    for h in list(root.handlers):
        if h.get_name() == _HANDLER_NAME:
            root.removeHandler(h)

    handler = logging.StreamHandler(sys.stderr)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    root.addHandler(handler)
