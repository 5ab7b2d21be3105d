from sqlalchemy import Column, Integer, String
from app.db.database import Base


class ReferenceSequence(Base):
    """Per-scope, per-year reference number counter, guarded by an optimistic version column."""
    __tablename__ = "reference_sequences"

    scope = Column(String(20), primary_key=True)
    year = Column(Integer, primary_key=True, autoincrement=False)
    last_value = Column(Integer, nullable=False, default=0)
    version_id = Column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version_id}
