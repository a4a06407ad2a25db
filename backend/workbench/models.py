from sqlalchemy import Column, Integer, String, Text
from .db import Base

class SavedRequestRow(Base):
    __tablename__ = "saved_requests"

    id = Column(String, primary_key=True)
    position = Column(Integer, nullable=False)
    name = Column(String, nullable=False)
    method = Column(String, nullable=False)
    url = Column(Text, nullable=False)
    headers = Column(Text)  # JSON string
    body = Column(Text)
    collection = Column(String, index=True)

class HistoryRow(Base):
    __tablename__ = "history"

    id = Column(Integer, primary_key=True, index=True)
    position = Column(Integer, nullable=False)
    timestamp = Column(Integer, nullable=False)
    request = Column(Text, nullable=False)  # JSON string

class EnvironmentRow(Base):
    __tablename__ = "environments"

    id = Column(String, primary_key=True)
    position = Column(Integer, nullable=False)
    name = Column(String, nullable=False)
    variables = Column(Text, nullable=False)  # JSON string

class SettingRow(Base):
    __tablename__ = "workspace_settings"

    key = Column(String, primary_key=True)
    value = Column(Text)
