import logging
import re
import shutil
import subprocess
import sys

from rapidfuzz import fuzz, process, utils

_ANSI_RE = re.compile(r"\x1b\[[0-9;]*m")
_FUZZY_SCORE_CUTOFF = 50


def strip_ansi(value):
    return _ANSI_RE.sub("", value or "")


class Selector:
    """Presents labelled items and returns the chosen value, or None on cancel."""

    name = ""

    def is_available(self):
        return False

    def select(self, items, prompt):
        return None


class FzfSelector(Selector):
    name = "fzf"

    def __init__(self, binary="fzf"):
        self.binary = binary

    def is_available(self):
        return shutil.which(self.binary) is not None

    def select(self, items, prompt):
        if not items:
            return None
        # Index-prefixed lines; fzf shows only the label column.
        lines = "\n".join(f"{idx}\t{item.label}" for idx, item in enumerate(items))
        cmd = [
            self.binary,
            "--prompt", f"{prompt} > ",
            "--height", "40%",
            "--reverse",
            "--ansi",
            "--delimiter", "\t",
            "--with-nth", "2",
        ]
        try:
            proc = subprocess.run(cmd, input=lines, stdout=subprocess.PIPE, text=True)
        except OSError as exc:
            logging.warning("fzf failed to start: %s", exc)
            return None
        if proc.returncode != 0:
            return None
        line = proc.stdout.strip()
        if not line:
            return None
        index_str = line.split("\t", 1)[0]
        if not index_str.isdigit():
            return None
        index = int(index_str)
        if index >= len(items):
            return None
        return items[index].value


class PromptSelector(Selector):
    """Numbered menu on the terminal; anything that is not a number filters fuzzily."""

    name = "prompt"

    def __init__(self, input_fn=input, output=None):
        self._input = input_fn
        self._output = output

    def is_available(self):
        return True

    def _write(self, text):
        out = self._output or sys.stderr
        out.write(text + "\n")
        out.flush()

    def _filter(self, items, query):
        labels = [strip_ansi(item.label) for item in items]
        matches = process.extract(
            query,
            labels,
            scorer=fuzz.WRatio,
            processor=utils.default_process,
            limit=None,
            score_cutoff=_FUZZY_SCORE_CUTOFF,
        )
        return [items[idx] for _label, _score, idx in matches]

    def select(self, items, prompt):
        visible = list(items)
        while visible:
            for idx, item in enumerate(visible, start=1):
                self._write(f"{idx:>3}. {item.label}")
            try:
                answer = self._input(f"{prompt} (number, text to filter, empty to cancel): ").strip()
            except EOFError:
                return None
            if not answer:
                return None
            if answer.isdigit():
                index = int(answer) - 1
                if 0 <= index < len(visible):
                    return visible[index].value
                self._write("Out of range.")
                continue
            filtered = self._filter(visible, answer)
            if not filtered:
                self._write("No match.")
                continue
            visible = filtered
        return None


_SELECTORS = {
    "fzf": FzfSelector,
    "prompt": PromptSelector,
}
_PRIORITY = ["fzf", "prompt"]


def detect_selector(preferred=None):
    """First available selector, trying ``preferred`` before the default order."""
    order = list(_PRIORITY)
    if preferred in _SELECTORS:
        order.remove(preferred)
        order.insert(0, preferred)
    for name in order:
        selector = _SELECTORS[name]()
        if selector.is_available():
            if preferred and name != preferred:
                logging.info("Selector %s unavailable; using %s", preferred, name)
            return selector
    return PromptSelector()
