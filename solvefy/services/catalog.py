import re

SUBJECT_ICONS = {
    'Toán': '🔢',
    'Tiếng Việt': '📖',
    'Tiếng Anh': '🇺🇸',
    'Khoa học': '🔬',
}

PUBLISHERS = ('Kết nối tri thức', 'Chân trời sáng tạo', 'Cánh diều')


def subject_icon(name):
    return SUBJECT_ICONS.get(name, '📚')


def grade_level(name):
    """First number in a grade name ('Lớp 3' -> 3), defaulting to 1."""
    match = re.search(r'\d+', name or '')
    return int(match.group(0)) if match else 1


def book_publisher(name):
    for publisher in PUBLISHERS:
        if publisher in (name or ''):
            return publisher
    return 'Unknown'
