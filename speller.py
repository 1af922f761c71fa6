'''
speller.py

Purpose:
    Spell-check a text file against one or more word lists. Every word that is
    missing from the word lists is reported with its line number, together with
    the dictionary words that are one inserted or one deleted letter away.

Features:
    - Builds the dictionary from two or more word-list files (any punctuation separates words).
    - Checks the target file line by line; repeated misspellings are reported on every line.
    - Suggests replacements by deleting or inserting a single letter.
    - Prints the report to the screen or writes it to a file (prompted, or chosen with flags).
    - Optional YAML configuration for extra dictionaries and the output mode.
    - Falls back to detected or latin-1 encodings for files that are not UTF-8.

Usage:
    python speller.py american-english supplemental-dict.txt essay.txt
    python speller.py american-english supplemental-dict.txt essay.txt --output report.txt
    python speller.py american-english supplemental-dict.txt essay.txt --mode print
'''

import argparse
import contextlib
import copy
import itertools
import logging
import os
import re
import string
import sys
from typing import Any, Callable, Iterable, Iterator, Mapping, MutableMapping, NamedTuple, Sequence, TextIO

import chardet
import yaml
from tqdm import tqdm


# ANSI Color Codes
BLUE = "\033[1;34m"
GREEN = "\033[1;32m"
RESET = "\033[0m"
BOLD = "\033[1m"

# Disable colors if not running in a terminal
if not sys.stdout.isatty():
    BLUE = GREEN = RESET = BOLD = ""


DEFAULT_CONFIG_FILE = "speller.yaml"

DEFAULT_CONFIG: dict[str, Any] = {
    'extra_dictionaries': [],
    'output': {
        'mode': None,
        'file': None,
    },
}

TOKEN_PATTERN = re.compile(r"[a-zA-Z0-9']+")

SEPARATOR = "-" * 33

PRINT = "p"
WRITE_TO_FILE = "w"

OUTPUT_MODES = {
    PRINT: 'print',
    'print': 'print',
    WRITE_TO_FILE: 'write',
    'write': 'write',
}


class MinimalFormatter(logging.Formatter):
    """A logging formatter that removes prefixes for INFO level messages."""

    def format(self, record: logging.LogRecord) -> str:
        if record.levelno == logging.INFO:
            return record.getMessage()
        return f"{record.levelname}: {record.getMessage()}"


class SpellerError(Exception):
    """Base class for errors reported by the spell checker."""


class SourceUnavailable(SpellerError):
    """Raised when a dictionary or the file to check cannot be read."""

    def __init__(self, path: str, reason: object) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot read '{path}': {reason}")


class DestinationUnwritable(SpellerError):
    """Raised when the report file cannot be created or written."""

    def __init__(self, path: str, reason: object) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot write report to '{path}': {reason}")


class InvalidModeSelection(SpellerError):
    """Raised when an output mode choice is neither print nor write."""

    def __init__(self, choice: object) -> None:
        self.choice = choice
        super().__init__(f"Unknown output mode '{choice}'.")


class ConfigError(SpellerError):
    """Raised when a configuration file is invalid."""


class Misspelling(NamedTuple):
    """A word missing from the dictionary and the 1-based line it was found on."""

    text: str
    line: int


def tokenize(text: str) -> Iterator[str]:
    """
    Yield the lowercase words of *text*.

    A word is a run of letters, digits and apostrophes; everything else
    separates words.
    """
    for match in TOKEN_PATTERN.finditer(text):
        yield match.group().lower()


def tokenize_lines(lines: Iterable[str]) -> Iterator[str]:
    """Yield the words of every line in turn."""
    for line in lines:
        yield from tokenize(line)


def detect_encoding(file_path: str) -> str | None:
    """Attempt to detect a file's encoding using chardet."""

    with open(file_path, 'rb') as f:
        raw_data = f.read()
    result = chardet.detect(raw_data)
    encoding = result.get('encoding')
    confidence = result.get('confidence') or 0
    if encoding and confidence > 0.5:
        logging.info(
            "Detected encoding '%s' for '%s' (confidence %.2f)",
            encoding,
            file_path,
            confidence,
        )
        return encoding

    logging.warning("Failed to reliably detect encoding for '%s'.", file_path)
    return None


def _read_with_encoding(path: str, encoding: str) -> list[str]:
    with open(path, 'r', encoding=encoding) as handle:
        return handle.readlines()


def read_lines(path: str) -> list[str]:
    """
    Read all lines of a text file.

    UTF-8 is tried first. If that fails the encoding detected by chardet is
    used, and latin-1 is the last resort since it accepts any byte sequence.

    Args:
        path (str): The file to read, or '-' for standard input.

    Returns:
        list: The lines of the file, including line endings.

    Raises:
        SourceUnavailable: If the file cannot be opened or read.
    """
    if path == '-':
        logging.debug("Reading from stdin.")
        try:
            return sys.stdin.readlines()
        except (OSError, UnicodeDecodeError) as e:
            raise SourceUnavailable('<stdin>', e) from e

    try:
        try:
            lines = _read_with_encoding(path, 'utf-8')
            used_encoding = 'utf-8'
        except UnicodeDecodeError:
            logging.warning("UTF-8 decoding failed for '%s'. Attempting detection...", path)
            detected_encoding = detect_encoding(path)
            lines = None
            if detected_encoding:
                logging.warning("Using detected encoding '%s' for '%s'.", detected_encoding, path)
                try:
                    lines = _read_with_encoding(path, detected_encoding)
                    used_encoding = detected_encoding
                except (UnicodeDecodeError, LookupError):
                    logging.warning(
                        "Detected encoding '%s' failed for '%s'. Fallback to latin-1.",
                        detected_encoding,
                        path,
                    )
            else:
                logging.warning("Encoding detection failed. Fallback to latin-1 for '%s'.", path)
            if lines is None:
                lines = _read_with_encoding(path, 'latin-1')
                used_encoding = 'latin-1'
    except OSError as e:
        raise SourceUnavailable(path, e.strerror or e) from e

    logging.debug("Loaded %d lines from '%s' using %s encoding.", len(lines), path, used_encoding)
    return lines


def build_dictionary(sources: Sequence[str], quiet: bool = False) -> frozenset[str]:
    """
    Build the dictionary from word-list files.

    Args:
        sources (list): Paths of the word lists. Their order does not matter.
        quiet (bool): Hide the progress bar.

    Returns:
        frozenset: Every lowercase word found in the sources.

    Raises:
        SourceUnavailable: If any source cannot be read. No partial dictionary
            is returned.
    """
    words: set[str] = set()
    for source in tqdm(sources, desc="Loading dictionaries", unit=' files', disable=quiet):
        before = len(words)
        words.update(tokenize_lines(read_lines(source)))
        logging.debug("Added %d new words from '%s'.", len(words) - before, source)
    logging.info("Loaded %d unique words from %d dictionary file(s).", len(words), len(sources))
    return frozenset(words)


def find_misspellings(lines: Iterable[str], dictionary: frozenset[str]) -> list[Misspelling]:
    """
    Return every word in *lines* that is not in *dictionary*.

    Lines are numbered from 1. Words are reported in the order they appear and
    a word that recurs is reported once per occurrence.
    """
    misspellings = []
    for line_number, line in enumerate(lines, start=1):
        for word in tokenize(line):
            if word not in dictionary:
                misspellings.append(Misspelling(word, line_number))
    return misspellings


def scan_file(path: str, dictionary: frozenset[str], quiet: bool = False) -> list[Misspelling]:
    """Read the file at *path* and return its misspellings."""
    lines = read_lines(path)
    misspellings = find_misspellings(
        tqdm(lines, desc=f"Checking {path}", unit=' lines', disable=quiet),
        dictionary,
    )
    logging.debug("Checked %d lines in '%s'.", len(lines), path)
    return misspellings


def generate_deletions(word: str) -> Iterator[str]:
    """Yield *word* with one letter removed, from the first position to the last."""
    for i in range(len(word)):
        yield word[:i] + word[i + 1:]


def generate_insertions(word: str) -> Iterator[str]:
    """
    Yield *word* with one letter a-z inserted.

    Insertion points run from before the first letter to after the last one;
    at each point the letters are tried in alphabetical order.
    """
    for i in range(len(word) + 1):
        left, right = word[:i], word[i:]
        for letter in string.ascii_lowercase:
            yield left + letter + right


def find_replacements(word: str, dictionary: frozenset[str]) -> list[str]:
    """
    Suggest dictionary words one deleted or one inserted letter away from *word*.

    Deletions are listed before insertions. A word reachable in several ways,
    such as 'misspelled' from 'mispelled' by inserting an 's' at either of two
    positions, is listed once.

    Args:
        word (str): The misspelled word.
        dictionary (frozenset): The known words.

    Returns:
        list: The suggestions in the order they were found, empty if none.
    """
    replacements = []
    already_suggested = set()
    for candidate in itertools.chain(generate_deletions(word), generate_insertions(word)):
        if candidate in dictionary and candidate not in already_suggested:
            already_suggested.add(candidate)
            replacements.append(candidate)
    return replacements


def format_entry(misspelling: Misspelling, replacements: Sequence[str]) -> list[str]:
    """Return the report lines for a single misspelling."""
    lines = [
        SEPARATOR,
        f"Word: {misspelling.text}",
        f"Line: {misspelling.line}",
    ]
    if replacements:
        lines.append("Possible replacements:")
        lines.extend(replacements)
    lines.append(SEPARATOR)
    lines.append("")
    return lines


def format_report(dictionary: frozenset[str], misspellings: Iterable[Misspelling]) -> Iterator[str]:
    """Yield the report lines for all misspellings, suggesting replacements for each."""
    for misspelling in misspellings:
        replacements = find_replacements(misspelling.text, dictionary)
        yield from format_entry(misspelling, replacements)


@contextlib.contextmanager
def smart_open_output(filename: str, encoding: str = 'utf-8') -> Iterator[TextIO]:
    """
    Context manager that yields a file object for writing.
    If filename is '-', yields sys.stdout.
    Otherwise, opens (and truncates) the file for writing.
    """
    if filename == '-':
        yield sys.stdout
    else:
        with open(filename, 'w', encoding=encoding) as f:
            yield f


def write_report(
    dictionary: frozenset[str],
    misspellings: Sequence[Misspelling],
    output_file: str,
) -> None:
    """
    Write the spelling report.

    Args:
        dictionary (frozenset): The known words, used to suggest replacements.
        misspellings (list): The misspellings to report, in order.
        output_file (str): Destination file, or '-' to print to the screen.

    Raises:
        DestinationUnwritable: If the destination cannot be created or written.
    """
    try:
        with smart_open_output(output_file) as out:
            for line in format_report(dictionary, misspellings):
                out.write(line + "\n")
    except OSError as e:
        target = '<stdout>' if output_file == '-' else output_file
        raise DestinationUnwritable(target, e.strerror or e) from e


def summarize(misspellings: Sequence[Misspelling]) -> None:
    """Log summary statistics for a list of misspellings."""
    if not misspellings:
        logging.info("No misspelled words found.")
        return
    distinct = len({m.text for m in misspellings})
    lines = len({m.line for m in misspellings})
    logging.info(
        "Found %d misspelled words (%d distinct) on %d line(s).",
        len(misspellings),
        distinct,
        lines,
    )


def parse_output_mode(choice: object) -> str:
    """
    Translate an output mode choice into 'print' or 'write'.

    Raises:
        InvalidModeSelection: If the choice is not one of p, w, print or write.
    """
    if isinstance(choice, str):
        mode = OUTPUT_MODES.get(choice.strip().lower())
        if mode:
            return mode
    raise InvalidModeSelection(choice)


def ask_output_mode(prompt: Callable[[str], str] | None = None, out: TextIO | None = None) -> str:
    """
    Ask the user whether to print the results or write them to a file.

    Keeps asking until a valid choice is entered.

    Args:
        prompt (callable): Reads one answer (default: ``input``).
        out (file): Where the questions are written (default: stdout).

    Returns:
        str: 'print' or 'write'.
    """
    prompt = prompt or input
    out = out or sys.stdout
    out.write("This spell checker outputs misspelled words in your file.\n")
    out.write(
        f'Shall the results be printed out (enter "{PRINT}") or written to a file (enter "{WRITE_TO_FILE}")?\n'
    )
    while True:
        choice = prompt("> ")
        try:
            return parse_output_mode(choice)
        except InvalidModeSelection:
            logging.debug("Rejected output mode '%s'.", choice)
            out.write(
                f"Hey! You have to enter one of these options: {PRINT} or {WRITE_TO_FILE}. Try again:\n"
            )


def ask_output_file(prompt: Callable[[str], str] | None = None, out: TextIO | None = None) -> str:
    """Ask the user for the name of the report file."""
    prompt = prompt or input
    out = out or sys.stdout
    out.write("Name the output file:\n")
    while True:
        name = prompt("> ").strip()
        if name:
            return name
        out.write("The file name cannot be empty. Try again:\n")


def _merge_defaults(
    config: MutableMapping[str, Any],
    defaults: Mapping[str, Any],
    path: list[str] | None = None,
) -> None:
    """Recursively merge default configuration values into the provided config."""

    if path is None:
        path = []

    for key, default_value in defaults.items():
        dotted_path = '.'.join(path + [key])
        if isinstance(default_value, dict):
            existing = config.setdefault(key, {})
            if not isinstance(existing, dict):
                raise ConfigError(f"Configuration value for '{dotted_path}' must be a mapping.")
            _merge_defaults(existing, default_value, path + [key])
        else:
            if key not in config:
                logging.debug(f"Applying default for '{dotted_path}': {default_value}")
            config.setdefault(key, copy.deepcopy(default_value))


def load_config(config_path: str | None) -> dict[str, Any]:
    """
    Load the YAML configuration file and fill in defaults.

    When *config_path* is None the default 'speller.yaml' is used if it
    exists; otherwise the defaults alone are returned.

    Raises:
        ConfigError: If the file is missing, unparsable or has the wrong shape.
    """
    if config_path is None:
        if not os.path.exists(DEFAULT_CONFIG_FILE):
            return copy.deepcopy(DEFAULT_CONFIG)
        config_path = DEFAULT_CONFIG_FILE

    try:
        with open(config_path, 'r', encoding='utf-8') as file:
            config = yaml.safe_load(file)
    except FileNotFoundError:
        raise ConfigError(f"Configuration file '{config_path}' not found.")
    except yaml.YAMLError as e:
        raise ConfigError(f"Error parsing YAML file '{config_path}': {e}")
    except OSError as e:
        raise ConfigError(f"Error reading '{config_path}': {e}")
    logging.debug(f"Parsed YAML configuration from '{config_path}'.")

    if config is None:
        config = {}
    if not isinstance(config, dict):
        raise ConfigError(f"Configuration file '{config_path}' must contain a mapping.")

    _merge_defaults(config, DEFAULT_CONFIG)

    extra = config['extra_dictionaries']
    if isinstance(extra, str):
        config['extra_dictionaries'] = [extra]
    elif not isinstance(extra, list):
        raise ConfigError("'extra_dictionaries' must be a list of file paths.")

    output_file = config['output']['file']
    if output_file is not None and not isinstance(output_file, str):
        raise ConfigError("'output.file' must be a file path.")

    return config


def resolve_output(
    mode: str | None,
    output_file: str | None,
    prompt: Callable[[str], str] | None = None,
) -> str:
    """
    Decide where the report goes, asking the user for anything not yet known.

    Args:
        mode (str): 'print', 'write', or None to ask.
        output_file (str): Report file name; '-' means print.
        prompt (callable): Reads answers when the user must be asked.

    Returns:
        str: The output file name, '-' for the screen.
    """
    if output_file == '-':
        if mode == 'write':
            logging.warning("Output '-' prints to the screen; ignoring write mode.")
        return '-'
    if mode is None:
        mode = 'write' if output_file else ask_output_mode(prompt)
    if mode == 'print':
        if output_file:
            logging.warning("Print mode selected; ignoring output file '%s'.", output_file)
        return '-'
    if not output_file:
        output_file = ask_output_file(prompt)
    return output_file


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description=f"{BOLD}Spell Checker: Report misspelled words and suggest replacements.{RESET}",
        formatter_class=argparse.RawTextHelpFormatter,
        epilog=f"""{BLUE}Examples:{RESET}
  {GREEN}python speller.py american-english supplemental-dict.txt essay.txt{RESET}
  {GREEN}python speller.py words.txt extra.txt essay.txt --output report.txt{RESET}
  {GREEN}python speller.py words.txt extra.txt essay.txt --mode print --quiet{RESET}
""",
    )

    io_group = parser.add_argument_group(f"{BLUE}INPUT/OUTPUT OPTIONS{RESET}")
    io_group.add_argument(
        'dictionaries',
        nargs='+',
        metavar='DICTIONARY',
        help="Two or more word-list files that make up the dictionary.",
    )
    io_group.add_argument(
        'target',
        metavar='FILE',
        help="The file to spell-check. Use '-' to read from standard input\n(requires --mode or --output, since the prompt also reads stdin).",
    )
    io_group.add_argument(
        '-o', '--output',
        type=str,
        help="Write the report to this file. Use '-' to print to the screen.",
    )
    io_group.add_argument(
        '-m', '--mode',
        choices=['print', 'write'],
        help="Print the report or write it to a file, instead of being asked.",
    )
    io_group.add_argument(
        '-c', '--config',
        type=str,
        help=f"The path to your YAML configuration file (default: {DEFAULT_CONFIG_FILE} if present).",
    )

    log_group = parser.add_argument_group(f"{BLUE}LOGGING OPTIONS{RESET}")
    log_group.add_argument(
        '-v', '--verbose',
        action='store_true',
        help="Show more detailed log messages.",
    )
    log_group.add_argument(
        '-q', '--quiet',
        action='store_true',
        help="Hide progress bars and show fewer log messages.",
    )
    return parser


def main() -> None:
    """
    Spell-check the target file and report the results.
    """
    parser = _build_parser()
    args = parser.parse_args()

    if len(args.dictionaries) < 2:
        parser.error("at least two dictionary files are required before the file to check")

    log_level = logging.DEBUG if args.verbose else logging.WARNING if args.quiet else logging.INFO
    # Log to stderr so a printed report on stdout stays clean
    handler = logging.StreamHandler()
    handler.setFormatter(MinimalFormatter())
    logging.basicConfig(level=log_level, handlers=[handler])

    try:
        config = load_config(args.config)
        config_mode = config['output']['mode']
        mode = args.mode or (parse_output_mode(config_mode) if config_mode is not None else None)
    except ConfigError as e:
        logging.error(str(e))
        sys.exit(1)
    except InvalidModeSelection as e:
        logging.error(f"Invalid 'output.mode' in configuration: {e}")
        sys.exit(1)
    output_file = args.output or config['output']['file']
    if args.target == '-' and mode is None and output_file is None:
        parser.error("reading the file to check from stdin requires --mode or --output")

    sources = list(args.dictionaries) + [str(p) for p in config['extra_dictionaries']]

    try:
        dictionary = build_dictionary(sources, quiet=args.quiet)
        misspellings = scan_file(args.target, dictionary, quiet=args.quiet)
    except SourceUnavailable as e:
        logging.error(str(e))
        sys.exit(1)

    summarize(misspellings)

    try:
        destination = resolve_output(mode, output_file)
    except EOFError:
        logging.error("No output mode selected.")
        sys.exit(1)

    try:
        write_report(dictionary, misspellings, destination)
    except DestinationUnwritable as e:
        logging.error(str(e))
        sys.exit(2)

    if destination != '-':
        logging.info("Report for %d misspelled words saved to '%s'.", len(misspellings), destination)


if __name__ == "__main__":
    main()
