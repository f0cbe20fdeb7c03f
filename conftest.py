import os

# Load .env.test for tests if present, e.g. to point DATABASE_URL at a
# local Supabase for the row-level policy tests.
from dotenv import load_dotenv

env_test_path = os.path.join(os.path.dirname(__file__), ".env.test")
if os.path.exists(env_test_path):
    load_dotenv(env_test_path, override=True)

os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("SITE_URL", "http://app.test")
os.environ.setdefault("SESSION_SECRET_KEY", "test-session-secret")

from libs.common.config import get_settings  # noqa: E402

# Clear cached settings to reload with new env vars
get_settings.cache_clear()
