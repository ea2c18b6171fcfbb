from slugify import slugify

QUESTION_TITLE_SLUG_LENGTH = 50

VIETNAMESE_REPLACEMENTS = [['đ', 'd'], ['Đ', 'd']]


def generate_slug(text):
    """Build a URL-friendly slug from Vietnamese (or any Latin) text.

    Diacritics are transliterated away, ``đ`` becomes ``d`` and every run of
    other characters collapses into a single hyphen.
    """
    return slugify(text or '', replacements=VIETNAMESE_REPLACEMENTS)


def slug_with_id(text, record_id):
    slug = generate_slug(text)
    return f'{slug}-{record_id}' if slug else str(record_id)


def question_slug(title, question_id):
    return slug_with_id((title or '')[:QUESTION_TITLE_SLUG_LENGTH], question_id)
