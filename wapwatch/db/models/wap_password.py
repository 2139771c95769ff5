from sqlalchemy import Column, Integer, Text, ForeignKey
from sqlalchemy.orm import relationship
from wapwatch.db.base import Base


class WapPassword(Base):
    __tablename__ = "passwords"

    id = Column(Integer, primary_key=True, autoincrement=True)
    wap_id = Column(Integer, ForeignKey("waps.id", ondelete="CASCADE"), nullable=False)
    password = Column(Text, nullable=True)

    wap = relationship("Wap", back_populates="passwords")
