import logging
import sys

from rich.logging import RichHandler

LOG_FORMAT = "%(message)s"


class ForeignFilter(logging.Filter):
    def filter(self, record):
        return record.name.startswith("gfontapi")


def setup_logging(facility, args, name):
    python_minus_m = name == "__main__"
    user_mode = not python_minus_m and not getattr(args, "show_tracebacks", False)

    handler = RichHandler(show_path=not user_mode)

    if user_mode:
        # Even with --log-level DEBUG, in user mode we only want to see
        # gfontapi-related logs, not requests/urllib3 chatter.
        handler.addFilter(ForeignFilter())

    logging.basicConfig(
        level=getattr(args, "log_level", "INFO"),
        format=LOG_FORMAT,
        datefmt="[%X]",
        handlers=[handler],
        force=True,
    )

    log = logging.getLogger(facility)

    def user_error_messages(_type, value, _traceback):
        """Print user-friendly error messages to the console when exceptions
        are raised instead of a traceback."""
        log.critical(value)

    if user_mode:
        sys.excepthook = user_error_messages

    return log
