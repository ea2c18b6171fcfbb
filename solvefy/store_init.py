import os
from solvefy.json_store import JsonStore

_store = None


def init_store(app_config=None):
    global _store

    data_dir = ''
    if app_config:
        data_dir = app_config.get('DATA_DIR', '')
    if not data_dir:
        data_dir = os.environ.get('DATA_DIR', './data')

    _store = JsonStore(data_dir)
    _store.ensure_files()
    return _store


def get_store():
    global _store
    if _store is None:
        init_store()
    return _store
