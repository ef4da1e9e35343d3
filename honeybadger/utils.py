import copy


def _matches(key, filter_keys):
    for f in filter_keys:
        if callable(f):
            if f(key):
                return True
        elif key == f:
            return True
    return False


def filter_dict(data, filter_keys):
    """
    Redact values whose keys match ``filter_keys`` (e.g. ``params_filters``).
    String entries match a key exactly; callables are called with the key.
    """
    if type(data) != dict:
        return data

    data_copy = copy.deepcopy(data)

    for key, value in data.items():
        # While tuples are considered valid dictionary keys,
        # they are not json serializable
        # so we remove them from the dictionary
        if type(key) == tuple:
            data_copy.pop(key)
            continue

        if _matches(key, filter_keys):
            data_copy[key] = "[FILTERED]"
        elif type(value) == dict:
            data_copy[key] = filter_dict(value, filter_keys)

    return data_copy


def filter_backtrace_line(line, filters):
    for f in filters:
        if not callable(f):
            continue
        line = f(line)
        if line is None:
            return None
    return line


def filter_backtrace(lines, filters):
    """
    Run each backtrace line through ``filters`` in order, dropping lines a
    filter returns None for.
    """
    filtered = []
    for line in lines:
        line = filter_backtrace_line(line, filters)
        if line is not None:
            filtered.append(line)
    return filtered
