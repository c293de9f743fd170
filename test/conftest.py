import os
import tempfile

# Settings are read at import time, so point uploads away from the repo first
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="dyc-uploads-"))
os.environ.setdefault("GOOGLE_CLIENT_ID", "test-client-id")
os.environ.setdefault("GOOGLE_CLIENT_SECRET", "test-client-secret")
