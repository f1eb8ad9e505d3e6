"""Optional-chaining lookups over decoded JSON trees.

A tree is any mix of dicts, lists and scalars. ``dig`` walks a path of dict
keys (str) and list indexes (int) and returns ``default`` as soon as a step
is missing or the node has the wrong shape.
"""

_MISSING = object()


def dig(node, *path, default=None):
    for step in path:
        if isinstance(step, int) and not isinstance(step, bool):
            if not isinstance(node, list):
                return default
            try:
                node = node[step]
            except IndexError:
                return default
        else:
            if not isinstance(node, dict):
                return default
            node = node.get(step, _MISSING)
            if node is _MISSING:
                return default
    return node


def dig_str(node, *path, default=""):
    value = dig(node, *path)
    if isinstance(value, str):
        return value
    return default


def dig_list(node, *path):
    value = dig(node, *path)
    if isinstance(value, list):
        return value
    return None
