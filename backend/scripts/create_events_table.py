from db import ensure_schema
from settings import settings

print('Connecting to', settings.db_url)
ensure_schema()
print('events table ready')
