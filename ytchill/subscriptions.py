import logging

from ytchill.errors import StorageError
from ytchill.fileio import atomic_write_text
from ytchill.models import Subscription

_DELIMITER = "\t"


def _clean_field(value):
    # Fields must not break the one-record-per-line, tab-separated layout.
    return " ".join(str(value or "").replace(_DELIMITER, " ").splitlines()).strip()


def parse_line(line):
    parts = line.rstrip("\r\n").split(_DELIMITER, 1)
    if len(parts) != 2:
        return None
    name, handle = parts[0].strip(), parts[1].strip()
    if not name or not handle:
        return None
    return Subscription(name=name, handle=handle)


class SubscriptionStore:
    """Flat ``name<TAB>handle`` file. Nothing is cached between calls."""

    def __init__(self, path):
        self.path = path

    def load(self):
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                lines = f.readlines()
        except FileNotFoundError:
            return []
        except OSError as exc:
            raise StorageError(f"Cannot read subscriptions {self.path}: {exc}", path=self.path) from exc

        subscriptions = []
        for lineno, line in enumerate(lines, start=1):
            if not line.strip():
                continue
            subscription = parse_line(line)
            if subscription is None:
                logging.debug("Skipping malformed subscription line %d in %s", lineno, self.path)
                continue
            subscriptions.append(subscription)
        return subscriptions

    def save(self, subscriptions):
        lines = [f"{_clean_field(s.name)}{_DELIMITER}{_clean_field(s.handle)}" for s in subscriptions]
        content = "\n".join(lines)
        if lines:
            content += "\n"
        atomic_write_text(self.path, content)

    def add(self, subscription):
        subscription = Subscription(name=_clean_field(subscription.name), handle=_clean_field(subscription.handle))
        subscriptions = self.load()
        for idx, existing in enumerate(subscriptions):
            if existing.handle == subscription.handle:
                subscriptions[idx] = subscription
                break
        else:
            subscriptions.append(subscription)
        self.save(subscriptions)
        logging.info("Subscribed to %s (%s)", subscription.name, subscription.handle)

    def remove(self, handle):
        handle = _clean_field(handle)
        subscriptions = self.load()
        remaining = [s for s in subscriptions if s.handle != handle]
        if len(remaining) == len(subscriptions):
            return False
        self.save(remaining)
        logging.info("Unsubscribed from %s", handle)
        return True

    def contains(self, handle):
        handle = _clean_field(handle)
        return any(s.handle == handle for s in self.load())
