import os
from dotenv import load_dotenv

load_dotenv()


def _env_bool(name, default='false'):
    return os.environ.get(name, default).lower() in ('true', '1', 'yes')


class Config:
    SECRET_KEY = os.environ.get('SESSION_SECRET') or os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-production'
    DATA_DIR = os.environ.get('DATA_DIR') or os.path.join(os.path.dirname(os.path.abspath(__file__)), 'data')
    REQUIRE_SESSION = _env_bool('REQUIRE_SESSION')
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO').upper()
    SITE_URL = os.environ.get('SITE_URL', 'https://solvefy.vercel.app').rstrip('/')
    BCRYPT_LOG_ROUNDS = int(os.environ.get('BCRYPT_LOG_ROUNDS', 12))
    BOOKS_PAGE_SIZE = 20
    QUESTIONS_PAGE_SIZE = 50
    MAX_PAGE_SIZE = 100
