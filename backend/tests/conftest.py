import os

# Settings are read at import time; tests never talk to a real database or provider.
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-for-finance-coach-tests")
os.environ.setdefault("JWT_ALGORITHM", "HS256")
os.environ.setdefault("JWT_AUDIENCE", "authenticated")
os.environ.setdefault("DATABASE_URL", "")
