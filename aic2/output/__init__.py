"""Terminal Output Formatting Package"""

import os
import re
import sys
import threading


class Colors:
    """ANSI escape codes for terminal colors."""
    RESET = '\033[0m'
    BOLD = '\033[1m'
    DIM = '\033[2m'
    RED = '\033[31m'
    GREEN = '\033[32m'
    YELLOW = '\033[33m'
    BLUE = '\033[34m'
    MAGENTA = '\033[35m'
    CYAN = '\033[36m'
    REVERSE = '\033[7m'


def _supports_color() -> bool:
    if os.environ.get('NO_COLOR'):
        return False
    if os.environ.get('FORCE_COLOR'):
        return True
    if not hasattr(sys.stdout, 'isatty') or not sys.stdout.isatty():
        return False
    if sys.platform == 'win32':
        try:
            import ctypes
            kernel32 = ctypes.windll.kernel32
            kernel32.SetConsoleMode(kernel32.GetStdHandle(-11), 7)
            return True
        except Exception:
            return False
    return True


def _supports_unicode() -> bool:
    if sys.platform == 'win32':
        try:
            '✓'.encode(sys.stdout.encoding or 'utf-8')
            return True
        except (UnicodeEncodeError, LookupError):
            return False
    return True


COLORS_ENABLED = _supports_color()
UNICODE_ENABLED = _supports_unicode()

CROSS = '✗' if UNICODE_ENABLED else '[X]'


def _colorize(text: str, *codes: str) -> str:
    if not COLORS_ENABLED:
        return text
    return f"{''.join(codes)}{text}{Colors.RESET}"


def error(text: str) -> str:
    return _colorize(text, Colors.RED)


def info(text: str) -> str:
    return _colorize(text, Colors.CYAN)


def dim(text: str) -> str:
    return _colorize(text, Colors.DIM)


def bold(text: str) -> str:
    return _colorize(text, Colors.BOLD)


def print_error(message: str) -> None:
    print(f"{error(CROSS)} {error(message)}", file=sys.stderr)


# Badge colour per backend display label prefix
PROVIDER_COLORS = {
    'ChatGPT': Colors.GREEN,
    'MistralAI': Colors.YELLOW,
    'Codestral': Colors.YELLOW,
    'Perplexity': Colors.CYAN,
    'Ollama': Colors.BLUE,
    'Claude': Colors.MAGENTA,
}

_BADGE = re.compile(r'^\[([^\]]+)\]')


def colorize_badge(name: str, is_error: bool = False) -> str:
    """Color the leading "[Backend]" badge of a display item name."""
    match = _BADGE.match(name)
    if not match or not COLORS_ENABLED:
        return name
    badge = match.group(0)
    if is_error:
        colored = _colorize(badge, Colors.BOLD, Colors.RED)
    else:
        label = match.group(1).split('_')[0]
        colored = _colorize(badge, Colors.BOLD, Colors.REVERSE, PROVIDER_COLORS.get(label, Colors.CYAN))
    return colored + name[len(badge):]


class Spinner:
    """Animated spinner for long operations. Use as context manager."""
    FRAMES_UNICODE = ['⠋', '⠙', '⠹', '⠸', '⠼', '⠴', '⠦', '⠧', '⠇', '⠏']
    FRAMES_ASCII = ['-', '\\', '|', '/']

    def __init__(self, message: str = ""):
        self._thread = None
        self._stop_event = threading.Event()
        self._frames = self.FRAMES_UNICODE if UNICODE_ENABLED else self.FRAMES_ASCII
        self._message = message

    def _spin(self):
        idx = 0
        while not self._stop_event.is_set():
            frame = self._frames[idx % len(self._frames)]
            print(f'\r\033[K{frame} {self._message}', end='', flush=True)
            idx += 1
            self._stop_event.wait(0.08)

    def __enter__(self):
        if sys.stdout.isatty():
            self._stop_event.clear()
            self._thread = threading.Thread(target=self._spin, daemon=True)
            self._thread.start()
        return self

    def __exit__(self, *args):
        self._stop_event.set()
        if self._thread:
            self._thread.join()
        if sys.stdout.isatty():
            print('\r\033[K', end='', flush=True)


__all__ = [
    "Colors", "COLORS_ENABLED", "UNICODE_ENABLED",
    "CROSS",
    "error", "info", "dim", "bold",
    "print_error",
    "colorize_badge", "Spinner", "PROVIDER_COLORS",
]
