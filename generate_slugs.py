"""
Backfill slugs on existing catalog and question rows.

Subjects and grades get ``slug(name)``, books and lessons ``slug(name)-<id>``
and questions ``slug(title[:50])-<id>``. Usage:

    python generate_slugs.py [--data-dir DIR] [--force]

Without ``--force`` only rows that have no slug are touched.
"""

import argparse
import sys

from config import Config
from solvefy.json_store import JsonStore
from solvefy.services.slugs import generate_slug, question_slug, slug_with_id

SLUGGED = ('subjects', 'grades', 'books', 'lessons', 'questions')


def derive_slug(collection, row):
    if collection in ('subjects', 'grades'):
        return generate_slug(row.get('name'))
    if collection == 'questions':
        return question_slug(row.get('title'), row.get('id'))
    return slug_with_id(row.get('name'), row.get('_id'))


def backfill_slugs(collections, force=False):
    """Set the slug of every row that lacks one (or of every row with ``force``).

    Mutates ``collections`` in place and returns the number of rows changed
    per collection.
    """
    changed = {}
    for name in SLUGGED:
        count = 0
        for row in collections[name]:
            if row.get('slug') and not force:
                continue
            slug = derive_slug(name, row)
            if row.get('slug') != slug:
                row['slug'] = slug
                count += 1
        changed[name] = count
    return changed


def main(argv=None):
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument('--data-dir', default=Config.DATA_DIR)
    parser.add_argument('--force', action='store_true', help='re-derive slugs that are already set')
    args = parser.parse_args(argv)

    store = JsonStore(args.data_dir)
    store.ensure_files()

    print("Generating slugs for all entities...")
    with store.transaction(*SLUGGED) as tx:
        changed = backfill_slugs(tx, force=args.force)
    for name in SLUGGED:
        print(f"   - {name.capitalize()}: {changed[name]} updated")
    print("All slugs generated!")
    return 0


if __name__ == '__main__':
    sys.exit(main())
