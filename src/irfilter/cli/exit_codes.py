"""Standard exit codes for the irfilter CLI.

Following shell conventions:
- 0: Success
- 1: General/business logic error
- 2: Command line usage error
- 130: Terminated by SIGINT (128 + 2)
- 143: Terminated by SIGTERM (128 + 15)
"""

import signal

EXIT_SUCCESS = 0
EXIT_ERROR = 1  # General/business logic error
EXIT_USAGE = 2  # Command line usage error
EXIT_SIGINT = 130  # 128 + SIGINT(2)
EXIT_SIGTERM = 143  # 128 + SIGTERM(15)


class SignalInterrupt(KeyboardInterrupt):
    """Raised by the CLI signal handler; remembers which signal arrived."""

    def __init__(self, signum: int) -> None:
        super().__init__(f"{signal.Signals(signum).name} received")
        self.signum = signum


def interrupt_exit_code(exc: KeyboardInterrupt) -> int:
    """Exit code for an interrupt; a plain Ctrl-C counts as SIGINT."""
    if getattr(exc, "signum", None) == signal.SIGTERM:
        return EXIT_SIGTERM
    return EXIT_SIGINT
