import os

from dotenv import load_dotenv
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import NullPool

from libs.LogConfig import get_logger
from . import tables
import pkgutil
import importlib
load_dotenv()

log = get_logger(__name__)

# Database connection configuration
# DATABASE_URL 有設定就直接用（測試用 sqlite+aiosqlite），否則組 PostgreSQL 連線字串
DB_HOST = os.getenv('DB_HOST', 'postgres')
DB_PORT = os.getenv('DB_PORT', '5432')
DB_NAME = os.getenv('DB_NAME', 'calendar_diary')
DB_USER = os.getenv('DB_SUPERUSER', 'postgres')
DB_PASSWORD = os.getenv('DB_SUPERPASS', 'default_password')

DATABASE_URL = os.getenv(
    "DATABASE_URL",
    f"postgresql+asyncpg://{DB_USER}:{DB_PASSWORD}@{DB_HOST}:{DB_PORT}/{DB_NAME}",
)

# SQLite 不共用連線池，每個 session 各開一條連線（避免跨 event loop 重用）
_engine_options = (
    {"poolclass": NullPool}
    if DATABASE_URL.startswith("sqlite")
    else {"pool_pre_ping": True}
)

engine = create_async_engine(
    DATABASE_URL,
    echo=False, # 需要時改True可以觀察SQL
    **_engine_options,
)

AsyncSessionLocal = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)

async def get_session():
    async with AsyncSessionLocal() as session:
        yield session


def import_models():
    """
    確保所有 ORM models 都會被 import，metadata 才能註冊成功
    """
    package = tables
    for _, module_name, _ in pkgutil.iter_modules(package.__path__):
        if module_name.startswith("_"):
            continue
        importlib.import_module(f"{package.__name__}.{module_name}")


async def create_db_and_tables() -> None:
    import_models()
    async with engine.begin() as conn:
        await conn.run_sync(tables.ORMBase.metadata.create_all)
