from sqlalchemy import BigInteger, Integer, JSON
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import declarative_base

Base = declarative_base()

# JSONB/BIGSERIAL on PostgreSQL, plain JSON/INTEGER keys elsewhere (SQLite in tests)
JsonPayload = JSON().with_variant(JSONB(), "postgresql")
BigIntPrimaryKey = BigInteger().with_variant(Integer(), "sqlite")
