# tests/conftest.py
import os
import sys

# Добавляем корень репозитория в PYTHONPATH, чтобы 'import datebook...' работал
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

# Тестовое окружение: in-memory SQLite; до первого импорта datebook.config
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
