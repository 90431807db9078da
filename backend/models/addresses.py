from sqlalchemy import Column, Integer, String, Text, Boolean, ForeignKey
from sqlalchemy.orm import relationship
from database import Base
from models.audit_mixin import TimestampMixin

class Address(Base, TimestampMixin):
    __tablename__ = "addresses"

    id = Column(Integer, primary_key=True, index=True)
    customer_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    label = Column(String(50), nullable=False)
    line1 = Column(String(200), nullable=False)
    line2 = Column(String(200), nullable=True)
    city = Column(String(100), nullable=False)
    area = Column(String(100), nullable=True)
    notes = Column(Text, nullable=True)
    is_default = Column(Boolean, default=False, nullable=False)

    customer = relationship("User", back_populates="addresses")

    def snapshot(self) -> dict:
        """Frozen copy stored on orders so later edits don't rewrite history."""
        return {
            "label": self.label,
            "line1": self.line1,
            "line2": self.line2,
            "city": self.city,
            "area": self.area,
            "notes": self.notes,
        }
