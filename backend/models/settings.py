from sqlalchemy import Column, Integer, String, Boolean
from database import Base


# Application-wide preferences, a single row edited by admins
class AppSettings(Base):
    __tablename__ = "app_settings"

    id = Column(Integer, primary_key=True, index=True)
    company_name = Column(String, nullable=True)
    currency = Column(String(3), nullable=True)
    low_stock_threshold = Column(Integer, nullable=True)
    default_category = Column(String, nullable=True)
    auto_generate_sku = Column(Boolean, nullable=True)
    items_per_page = Column(Integer, nullable=True)
