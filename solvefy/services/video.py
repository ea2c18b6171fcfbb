import re
from urllib.parse import urlparse

YOUTUBE_THUMBNAIL_URL = 'https://img.youtube.com/vi/{}/maxresdefault.jpg'

_YOUTUBE_ID = re.compile(r'(?:youtube\.com/watch\?(?:[^#\s]*&)?v=|youtu\.be/)([\w-]+)')


def youtube_video_id(url):
    """Extract the video id from a youtube.com/watch or youtu.be URL, or None."""
    if not url:
        return None
    match = _YOUTUBE_ID.search(url)
    return match.group(1) if match else None


def youtube_thumbnail(url):
    video_id = youtube_video_id(url)
    if not video_id:
        return None
    return YOUTUBE_THUMBNAIL_URL.format(video_id)


def detect_video_type(url):
    host = (urlparse(url).netloc or '').lower()
    if host.endswith('youtube.com') or host.endswith('youtu.be'):
        return 'youtube'
    if host.endswith('vimeo.com'):
        return 'vimeo'
    return 'uploaded'
