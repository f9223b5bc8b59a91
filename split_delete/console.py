import sys

from tqdm import tqdm

from split_delete.models import Colors


def echo(message: str = "") -> None:
    # tqdm.write keeps messages from tearing an active progress bar
    tqdm.write(message, file=sys.stdout)


def echo_error(message: str) -> None:
    tqdm.write(f"{Colors.RED}{message}{Colors.RESET}", file=sys.stderr)


def echo_success(message: str) -> None:
    echo(f"{Colors.GREEN}{message}{Colors.RESET}")
