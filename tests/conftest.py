import os
import tempfile

# Settings are read at import time; point the app at throwaway storage before anything imports it.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="lending-uploads-"))
os.environ.setdefault("LOG_LEVEL", "WARNING")
