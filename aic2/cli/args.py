"""CLI Argument Parsing"""

import argparse
import argcomplete

from aic2 import COMMIT_CONVENTIONS, __version__
from aic2.config import MAX_GENERATE, VALID_PROVIDERS


def _generate_count(value: str) -> int:
    count = int(value)
    if not 1 <= count <= MAX_GENERATE:
        raise argparse.ArgumentTypeError(f"must be between 1 and {MAX_GENERATE}")
    return count


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog='aic2',
        description='Generate commit messages or code reviews for staged changes with an LLM',
        epilog='Example: aic2 -p openai -g 3'
    )

    parser.add_argument('-v', '--version', action='version', version=f'%(prog)s {__version__}')

    # Backend options
    parser.add_argument('-p', '--provider', type=str, choices=sorted(VALID_PROVIDERS), help='LLM backend (default: "provider" from .aic2rc)')
    parser.add_argument('-m', '--model', type=str, metavar='MODEL', help='Model name')

    # Generation options
    parser.add_argument('-r', '--review', action='store_true', help='Review the staged changes instead of writing a commit message')
    parser.add_argument('-g', '--generate', type=_generate_count, metavar='N', help=f'Number of commit messages to ask for (1-{MAX_GENERATE})')
    parser.add_argument('-l', '--locale', type=str, metavar='LOCALE', help='Output language, e.g. en, ko, de')
    parser.add_argument('-t', '--type', type=str, choices=[c for c in COMMIT_CONVENTIONS if c], help='Commit message convention')
    parser.add_argument('--no-body', action='store_true', help='Use the title only as the commit message')

    # Output options
    parser.add_argument('--strict', action='store_true', help='Exit with status 1 if generation fails (for CI use)')
    parser.add_argument('--verbose', action='store_true', help='Show debug logging on stderr')

    # Config
    parser.add_argument('--display-config', action='store_true', help='Show current configuration')
    parser.add_argument('--install-completion', action='store_true', help='Show how to enable shell tab completion')

    argcomplete.autocomplete(parser)
    return parser.parse_args(argv)
