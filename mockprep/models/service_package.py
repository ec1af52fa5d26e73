from sqlalchemy import Column, Integer, String, DateTime, Boolean, Text, ForeignKey, Float
from sqlalchemy.orm import relationship
from datetime import datetime
from mockprep.database import Base


SERVICE_TYPES = ("avatar_interview", "test_quiz_eq", "jd_upload")


class ServicePackage(Base):
    __tablename__ = "service_packages"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Float, nullable=False, default=0.0)
    duration = Column(Integer, nullable=False, default=30)  # days

    # Usage limits per service
    avatar_interview_limit = Column(Integer, default=0, nullable=False)
    test_quiz_eq_limit = Column(Integer, default=0, nullable=False)
    jd_upload_limit = Column(Integer, default=0, nullable=False)

    highlight = Column(Boolean, default=False)
    is_active = Column(Boolean, default=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user_packages = relationship("UserPackage", back_populates="service_package")


class UserPackage(Base):
    __tablename__ = "user_packages"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    service_package_id = Column(Integer, ForeignKey("service_packages.id"), nullable=False)

    start_date = Column(DateTime, default=datetime.utcnow)
    end_date = Column(DateTime, nullable=False)

    # Usage counters
    avatar_interview_used = Column(Integer, default=0, nullable=False)
    test_quiz_eq_used = Column(Integer, default=0, nullable=False)
    jd_upload_used = Column(Integer, default=0, nullable=False)

    is_active = Column(Boolean, default=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("User", back_populates="packages")
    service_package = relationship("ServicePackage", back_populates="user_packages")

    def used(self, service_type: str) -> int:
        return getattr(self, f"{service_type}_used")

    def limit(self, service_type: str) -> int:
        return getattr(self.service_package, f"{service_type}_limit")
