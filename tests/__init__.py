import os
from pathlib import Path

# Integration tests read node URIs from a local .env file
ENV_FILE = Path('.env')

if ENV_FILE.exists():
    for line in ENV_FILE.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith('#'):
            continue
        key, _, value = line.partition('=')
        os.environ.setdefault(key.strip(), value.strip())
