from argparse import ArgumentParser


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class GFontArgumentParser(ArgumentParser):

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.add_argument(
            "--log-level",
            choices=LOG_LEVELS,
            default="INFO",
            type=str.upper,
            help="Logging verbosity. Default is INFO",
        )
        self.add_argument(
            "--show-tracebacks",
            action="store_true",
            help=(
                "By default, exceptions will only print out error messages. "
                "Tracebacks won't be included."
            ),
        )
