"""
Flat JSON collection store.

Each collection is a single JSON array on disk. Reads load the whole
array; writes replace the whole file. Mutations run inside
``transaction()``, which holds the lock of every collection involved
(an in-process lock plus an fcntl lock file, so several WSGI workers
sharing a data directory serialise too) and only writes back the
collections that actually changed.
"""

import copy
import fcntl
import json
import logging
import os
import threading
from contextlib import contextmanager

from solvefy.errors import StorageError

logger = logging.getLogger(__name__)

COLLECTION_FILES = {
    'subjects': 'subjects.json',
    'grades': 'grades.json',
    'books': 'books.json',
    'lessons': 'lessons.json',
    'questions': 'questions.json',
    'answers': 'answers.json',
    'users': 'users.json',
    'bookmarks': 'user_bookmarks.json',
    'progress': 'user_progress.json',
}


class JsonStore:

    def __init__(self, data_dir, files=None):
        self.data_dir = data_dir
        self._files = dict(files or COLLECTION_FILES)
        self._locks = {name: threading.Lock() for name in self._files}

    @property
    def collections(self):
        return list(self._files)

    def path(self, name):
        try:
            return os.path.join(self.data_dir, self._files[name])
        except KeyError:
            raise StorageError(f'Unknown collection: {name}') from None

    def ensure_files(self):
        """Create the data directory and an empty array for each missing file."""
        os.makedirs(self.data_dir, exist_ok=True)
        for name in self._files:
            path = self.path(name)
            if not os.path.exists(path):
                self._dump(path, [])
                logger.info('Initialised empty collection %s', path)

    # -- Locking ------------------------------------------------------------

    @contextmanager
    def _locked(self, names):
        names = sorted(set(names))
        acquired = []
        try:
            for name in names:
                self.path(name)
                self._locks[name].acquire()
                lock_path = os.path.join(self.data_dir, f'.{name}.lock')
                lock_file = None
                try:
                    lock_file = open(lock_path, 'w')
                    fcntl.flock(lock_file, fcntl.LOCK_EX)
                except OSError as e:
                    if lock_file:
                        lock_file.close()
                    self._locks[name].release()
                    raise StorageError(f'Could not lock collection {name}') from e
                acquired.append((name, lock_file))
            yield
        finally:
            for name, lock_file in reversed(acquired):
                fcntl.flock(lock_file, fcntl.LOCK_UN)
                lock_file.close()
                self._locks[name].release()

    # -- File I/O -----------------------------------------------------------

    def _load(self, name):
        path = self.path(name)
        try:
            with open(path, encoding='utf-8') as f:
                rows = json.load(f)
        except FileNotFoundError as e:
            raise StorageError(f'Collection file missing: {self._files[name]}') from e
        except (OSError, ValueError) as e:
            raise StorageError(f'Could not read {self._files[name]}') from e
        if not isinstance(rows, list):
            raise StorageError(f'{self._files[name]} does not hold a JSON array')
        return rows

    @staticmethod
    def _dump(path, rows):
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(rows, f, ensure_ascii=False, indent=2)
            f.write('\n')

    def _commit(self, changed):
        """Write every changed collection or none of them.

        All new contents are staged to temp files first; only then are the
        live files swapped in. If a swap fails, files already swapped are
        restored from their previous bytes.
        """
        staged = []
        try:
            for name, rows in changed.items():
                tmp = self.path(name) + '.tmp'
                self._dump(tmp, rows)
                staged.append((name, tmp))
        except (OSError, TypeError, ValueError) as e:
            for _, tmp in staged:
                _discard(tmp)
            raise StorageError('Could not write collection data') from e

        backups = {}
        replaced = []
        try:
            for name, tmp in staged:
                with open(self.path(name), 'rb') as f:
                    backups[name] = f.read()
            for name, tmp in staged:
                os.replace(tmp, self.path(name))
                replaced.append(name)
        except OSError as e:
            for name in replaced:
                with open(self.path(name), 'wb') as f:
                    f.write(backups[name])
            for name, tmp in staged:
                if name not in replaced:
                    _discard(tmp)
            raise StorageError('Could not write collection data') from e

    # -- Public API ---------------------------------------------------------

    def read(self, name):
        """Return the full array of a collection."""
        with self._locked([name]):
            return self._load(name)

    def write(self, name, rows):
        """Replace a collection's contents."""
        with self._locked([name]):
            self._commit({name: rows})

    @contextmanager
    def transaction(self, *names):
        """Load ``names`` under lock and yield them as a dict of lists.

        Mutate the lists in place; on normal exit the collections that
        changed are written back together. An exception inside the block
        discards every change.
        """
        with self._locked(names):
            data = {name: self._load(name) for name in names}
            original = copy.deepcopy(data)
            yield data
            changed = {name: rows for name, rows in data.items() if rows != original[name]}
            if changed:
                self._commit(changed)


def _discard(path):
    try:
        os.remove(path)
    except OSError:
        pass
