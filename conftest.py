# Root conftest.py - MUST be at project root so `testbed` and `statistical`
# are importable during collection without an editable install.

# Load environment variables FIRST (e.g. TESTBED_CONFIG), before any testbed
# module reads them.
from dotenv import load_dotenv
load_dotenv()

# Note: Fixtures from tests/conftest.py are automatically discovered by pytest
# since tests/ is a subdirectory.
