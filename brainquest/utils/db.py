# brainquest/utils/db.py
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker
from brainquest.utils.config import settings

# Attempt, session, XP and streak writes for one answer run as concurrent
# background tasks; SQLite serializes them, so give each writer time to wait.
connect_args = {}
if make_url(settings.database_url).get_backend_name() == "sqlite":
    connect_args["timeout"] = 30

engine = create_async_engine(
    settings.database_url,
    echo=False,  # Set to True to see SQL queries
    connect_args=connect_args,
)

# Sessions stay usable after commit; records are read back for responses
AsyncSessionLocal = sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)

async def get_db() -> AsyncSession:
    """FastAPI dependency yielding one session per request."""
    async with AsyncSessionLocal() as session:
        yield session
