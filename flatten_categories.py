"""
Import a nested categories tree into the flat catalog collections.

The tree is a JSON list of subjects, each with ``children`` grades, whose
children are books, whose children are lessons. Usage:

    python flatten_categories.py categories.json [--data-dir DIR]
    python flatten_categories.py --deactivate SUBJECT_ID [--data-dir DIR]
"""

import argparse
import json
import sys

from config import Config
from solvefy.json_store import JsonStore
from solvefy.models import Book, Grade, Lesson, Subject
from solvefy.services.catalog import book_publisher, grade_level, subject_icon
from solvefy.services.slugs import generate_slug, slug_with_id

CATALOG = ('subjects', 'grades', 'books', 'lessons')


def flatten_categories(tree):
    """Turn the nested tree into four flat lists keyed by collection name."""
    out = {name: [] for name in CATALOG}

    for subject in tree:
        out['subjects'].append(Subject(
            id=subject['id'],
            name=subject['name'],
            slug=generate_slug(subject['name']),
            icon=subject_icon(subject['name']),
            description=subject.get('description'),
            created_by=subject.get('createdBy'),
            created_at=subject.get('createdAt'),
            updated_at=subject.get('updatedAt') or subject.get('createdAt'),
        ).to_dict())

        for grade in subject.get('children') or []:
            out['grades'].append(Grade(
                id=grade['id'],
                subject_id=subject['id'],
                name=grade['name'],
                slug=generate_slug(grade['name']),
                level=grade_level(grade['name']),
                description=grade.get('description'),
                created_by=grade.get('createdBy'),
                created_at=grade.get('createdAt'),
                updated_at=grade.get('updatedAt') or grade.get('createdAt'),
            ).to_dict())

            for book in grade.get('children') or []:
                out['books'].append(Book(
                    id=book['id'],
                    grade_id=grade['id'],
                    subject_id=subject['id'],
                    name=book['name'],
                    publisher=book_publisher(book['name']),
                    slug=slug_with_id(book['name'], book['id']),
                    description=book.get('description'),
                    cover_image_url=book.get('coverImageUrl'),
                    publication_year=book.get('publicationYear'),
                    created_by=book.get('createdBy'),
                    created_at=book.get('createdAt'),
                    updated_at=book.get('updatedAt') or book.get('createdAt'),
                ).to_dict())

                for order, lesson in enumerate(book.get('children') or [], start=1):
                    out['lessons'].append(Lesson(
                        id=lesson['id'],
                        book_id=book['id'],
                        grade_id=grade['id'],
                        subject_id=subject['id'],
                        name=lesson['name'],
                        slug=slug_with_id(lesson['name'], lesson['id']),
                        content=lesson.get('content'),
                        description=lesson.get('description'),
                        sort_order=lesson.get('sortOrder', order),
                        created_by=lesson.get('createdBy'),
                        created_at=lesson.get('createdAt'),
                        updated_at=lesson.get('updatedAt') or lesson.get('createdAt'),
                    ).to_dict())
    return out


def validate_relationships(collections):
    """List every dangling parent reference in the flat catalog."""
    ids = {name: {row['_id'] for row in collections[name]} for name in CATALOG}
    errors = []
    checks = (
        ('grades', 'subjectId', 'subjects'),
        ('books', 'gradeId', 'grades'),
        ('books', 'subjectId', 'subjects'),
        ('lessons', 'bookId', 'books'),
        ('lessons', 'gradeId', 'grades'),
        ('lessons', 'subjectId', 'subjects'),
    )
    for child, field, parent in checks:
        for row in collections[child]:
            if row.get(field) not in ids[parent]:
                errors.append(f"{child[:-1]} {row['_id']} references missing {parent[:-1]} {row.get(field)}")
    return errors


def deactivate_subject(collections, subject_id):
    """Set isActive=false on a subject and every grade, book and lesson under it.

    Returns the number of rows changed per collection.
    """
    if not any(row['_id'] == subject_id for row in collections['subjects']):
        raise KeyError(subject_id)
    models = {'subjects': Subject, 'grades': Grade, 'books': Book, 'lessons': Lesson}
    changed = {}
    for name in CATALOG:
        field = '_id' if name == 'subjects' else 'subjectId'
        count = 0
        for i, row in enumerate(collections[name]):
            if row.get(field) != subject_id or not row.get('isActive', True):
                continue
            record = models[name].from_dict(row)
            record.is_active = False
            collections[name][i] = {**row, **record.to_dict()}
            count += 1
        changed[name] = count
    return changed


def main(argv=None):
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument('tree', nargs='?', help='nested categories JSON file')
    parser.add_argument('--data-dir', default=Config.DATA_DIR)
    parser.add_argument('--deactivate', metavar='SUBJECT_ID')
    args = parser.parse_args(argv)

    if not args.tree and not args.deactivate:
        parser.error('give a categories file or --deactivate SUBJECT_ID')

    store = JsonStore(args.data_dir)
    store.ensure_files()

    if args.deactivate:
        with store.transaction(*CATALOG) as tx:
            try:
                changed = deactivate_subject(tx, args.deactivate)
            except KeyError:
                print(f"Subject {args.deactivate} not found")
                return 1
        print(f"Deactivated subject {args.deactivate}: " +
              ', '.join(f'{name}={count}' for name, count in changed.items()))
        return 0

    with open(args.tree, encoding='utf-8') as f:
        tree = json.load(f)
    flat = flatten_categories(tree)

    errors = validate_relationships(flat)
    for error in errors:
        print(f"Invalid: {error}")
    if errors:
        print(f"Found {len(errors)} validation errors, nothing written.")
        return 1

    with store.transaction(*CATALOG) as tx:
        for name in CATALOG:
            tx[name][:] = flat[name]

    print("Flattening completed!")
    for name in CATALOG:
        print(f"   - {name.capitalize()}: {len(flat[name])} items")
    return 0


if __name__ == '__main__':
    sys.exit(main())
