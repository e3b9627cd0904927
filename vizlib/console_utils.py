#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# ****************************************************************************************************************************************************
# * BSD 3-Clause License
# *
# * Copyright (c) 2025, Mana Battery
# * All rights reserved.
# *
# * Redistribution and use in source and binary forms, with or without modification, are permitted provided that the following conditions are met:
# *
# * 1. Redistributions of source code must retain the above copyright notice, this list of conditions and the following disclaimer.
# * 2. Redistributions in binary form must reproduce the above copyright notice, this list of conditions and the following disclaimer in the
# *    documentation and/or other materials provided with the distribution.
# * 3. Neither the name of the copyright holder nor the names of its contributors may be used to endorse or promote products derived from this
# *    software without specific prior written permission.
# *
# * THIS SOFTWARE IS PROVIDED BY THE COPYRIGHT HOLDERS AND CONTRIBUTORS "AS IS" AND ANY EXPRESS OR IMPLIED WARRANTIES, INCLUDING, BUT NOT LIMITED TO,
# * THE IMPLIED WARRANTIES OF MERCHANTABILITY AND FITNESS FOR A PARTICULAR PURPOSE ARE DISCLAIMED. IN NO EVENT SHALL THE COPYRIGHT HOLDER OR
# * CONTRIBUTORS BE LIABLE FOR ANY DIRECT, INDIRECT, INCIDENTAL, SPECIAL, EXEMPLARY, OR CONSEQUENTIAL DAMAGES (INCLUDING, BUT NOT LIMITED TO,
# * PROCUREMENT OF SUBSTITUTE GOODS OR SERVICES; LOSS OF USE, DATA, OR PROFITS; OR BUSINESS INTERRUPTION) HOWEVER CAUSED AND ON ANY THEORY OF
# * LIABILITY, WHETHER IN CONTRACT, STRICT LIABILITY, OR TORT (INCLUDING NEGLIGENCE OR OTHERWISE) ARISING IN ANY WAY OUT OF THE USE OF THIS SOFTWARE,
# * EVEN IF ADVISED OF THE POSSIBILITY OF SUCH DAMAGE.
# ****************************************************************************************************************************************************
"""Colorama wrapper utilities for colored terminal output and progress feedback."""

import os
import sys
import time
import logging
import threading
from typing import List, Optional, TextIO

from colorama import Fore, Style, init

from vizlib.constants import MESSAGES
from vizlib.file_utils import display_name

logger = logging.getLogger(__name__)

# Keep escape codes even when stdout is piped; should_use_color() decides whether to emit them
init(autoreset=False, strip=False)


class Colors:
    """Color codes for terminal output."""

    RED = Fore.RED
    GREEN = Fore.GREEN
    YELLOW = Fore.YELLOW
    BLUE = Fore.BLUE
    MAGENTA = Fore.MAGENTA
    CYAN = Fore.CYAN
    WHITE = Fore.WHITE

    RESET = Style.RESET_ALL
    BRIGHT = Style.BRIGHT
    DIM = Style.DIM
    NORMAL = Style.NORMAL

    @staticmethod
    def disable() -> None:
        """Disable all color output."""
        for attr in dir(Colors):
            if not attr.startswith("_") and attr != "disable":
                setattr(Colors, attr, "")


def colored(text: str, color: str = "", style: str = "") -> str:
    """Return colored text string.

    Args:
        text: Text to colorize
        color: Color code (e.g., Colors.RED)
        style: Style code (e.g., Colors.BRIGHT)

    Returns:
        Formatted string with color codes
    """
    if not color:
        return text

    return f"{style}{color}{text}{Colors.RESET}"


def print_colored(text: str, color: str = "", style: str = "", file: Optional[TextIO] = None) -> None:
    """Print colored text to file/stdout."""
    if file is None:
        file = sys.stdout

    print(colored(text, color, style), file=file)


def print_success(text: str, file: Optional[TextIO] = None, prefix: bool = False) -> None:
    """Print success message in green.

    Args:
        text: Message to print
        file: File object (default: sys.stdout)
        prefix: If True, prepend "Success: " to message
    """
    message = f"Success: {text}" if prefix else text
    print_colored(message, Colors.GREEN, file=file)


def print_error(text: str, file: Optional[TextIO] = None, prefix: bool = True) -> None:
    """Print error message in red to stderr.

    Args:
        text: Error message to print
        file: File object (default: sys.stderr)
        prefix: If True, prepend "Error: " to message (default: True)
    """
    if file is None:
        file = sys.stderr
    message = f"Error: {text}" if prefix else text
    print_colored(message, Colors.RED, file=file)


def print_warning(text: str, file: Optional[TextIO] = None, prefix: bool = True) -> None:
    """Print warning message in yellow to stderr."""
    if file is None:
        file = sys.stderr
    message = f"Warning: {text}" if prefix else text
    print_colored(message, Colors.YELLOW, file=file)


def print_info(text: str, file: Optional[TextIO] = None) -> None:
    """Print info message in cyan."""
    print_colored(text, Colors.CYAN, file=file)


def print_highlight(text: str, file: Optional[TextIO] = None) -> None:
    """Print highlighted text in bright white."""
    print_colored(text, Colors.WHITE, Colors.BRIGHT, file=file)


def should_use_color(force_color: bool = False, no_color: bool = False) -> bool:
    """Determine if color should be used based on environment and flags.

    Args:
        force_color: Force color output regardless of terminal
        no_color: Disable color output

    Returns:
        True if color should be used
    """
    if no_color:
        return False

    if force_color:
        return True

    if not sys.stdout.isatty():
        return False

    # See no-color.org
    if os.environ.get("NO_COLOR"):
        return False

    return True


class Spinner:
    """Single-line progress spinner drawn from a background thread.

    The spinner only animates when the stream is a terminal. On pipes and in
    tests it stays silent, so captured output contains no control characters.

    Usage:
        with Spinner("Finding source files...") as spinner:
            ...
            spinner.set_title("Parsing files...")
    """

    FRAMES = "⠋⠙⠹⠸⠼⠴⠦⠧⠇⠏"

    def __init__(self, title: str, stream: Optional[TextIO] = None, interval: float = 0.08, enabled: bool = True):
        self.title = title
        self.stream = stream if stream is not None else sys.stdout
        self.interval = interval
        self.enabled = enabled and _is_tty(self.stream)
        self._stop_event = threading.Event()
        self._lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> "Spinner":
        if not self.enabled or self.running:
            return self
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._spin, name="codeviz-spinner", daemon=True)
        self._thread.start()
        return self

    def set_title(self, title: str) -> None:
        with self._lock:
            self.title = title
        logger.debug("%s", title)

    def stop(self, clear: bool = True) -> None:
        if self._thread is None:
            return
        self._stop_event.set()
        self._thread.join()
        self._thread = None
        if clear:
            with self._lock:
                self.stream.write("\r\033[K")
                self.stream.flush()

    def _spin(self) -> None:
        index = 0
        while not self._stop_event.is_set():
            with self._lock:
                frame = self.FRAMES[index % len(self.FRAMES)]
                self.stream.write(f"\r{colored(frame + ' ' + self.title, Colors.BLUE)}\033[K")
                self.stream.flush()
            index += 1
            time.sleep(self.interval)

    def __enter__(self) -> "Spinner":
        return self.start()

    def __exit__(self, exc_type: object, exc: object, tb: object) -> None:
        self.stop()


def _is_tty(stream: TextIO) -> bool:
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty())


def format_cycle_path(cycle: List[str], root_dir: str) -> str:
    """Format the members of a cycle as indented arrow lines relative to root_dir."""
    return "\n".join(f"    -> {display_name(os.path.relpath(path, root_dir))}" for path in cycle)


def print_cycle_report(cycles: List[List[str]], root_dir: str, file: Optional[TextIO] = None) -> None:
    """Print the circular dependency report.

    Each cycle is listed member by member and closed with an arrow back to its
    first file, so the loop reads naturally.

    Args:
        cycles: Detected cycles (lists of absolute file paths)
        root_dir: Root directory used for relative display paths
        file: File object (default: sys.stdout)
    """
    if not cycles:
        print_colored(f"\n{MESSAGES['NO_CYCLES']}", Colors.GREEN, file=file)
        return

    print_colored(f"\n{MESSAGES['CYCLES_FOUND'].format(count=len(cycles))}", Colors.YELLOW, Colors.BRIGHT, file=file)
    for index, cycle in enumerate(cycles, start=1):
        print_colored(f"  Cycle {index}:", Colors.YELLOW, file=file)
        print_colored(format_cycle_path(cycle, root_dir), Colors.RED, file=file)
        print_colored(f"    -> {display_name(os.path.relpath(cycle[0], root_dir))}", Colors.RED, file=file)
