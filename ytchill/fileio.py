import json
import os
import tempfile

from ytchill.errors import StorageError
from ytchill.paths import ensure_dir


def atomic_write_text(path, content):
    """Replace ``path`` with ``content`` so readers see old or new, never half.

    The temp file lives next to the target so ``os.replace`` stays on one
    filesystem.
    """
    target_dir = os.path.dirname(path) or "."
    try:
        ensure_dir(target_dir)
        tmp = tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            delete=False,
            dir=target_dir,
            prefix=f".{os.path.basename(path)}.",
            suffix=".tmp",
        )
    except OSError as exc:
        raise StorageError(f"Cannot write {path}: {exc}", path=path) from exc
    try:
        tmp.write(content)
        tmp.flush()
        os.fsync(tmp.fileno())
        tmp.close()
        os.replace(tmp.name, path)
    except OSError as exc:
        raise StorageError(f"Cannot write {path}: {exc}", path=path) from exc
    finally:
        tmp.close()
        if os.path.exists(tmp.name):
            try:
                os.unlink(tmp.name)
            except OSError:
                pass


def atomic_write_json(path, payload, indent=None):
    try:
        content = json.dumps(payload, indent=indent, ensure_ascii=False)
    except (TypeError, ValueError) as exc:
        raise StorageError(f"Cannot serialize data for {path}: {exc}", path=path) from exc
    atomic_write_text(path, content)


def remove_file(path):
    """Delete ``path``; a file that is already gone is not an error."""
    try:
        os.remove(path)
    except FileNotFoundError:
        return False
    except OSError as exc:
        raise StorageError(f"Cannot remove {path}: {exc}", path=path) from exc
    return True
