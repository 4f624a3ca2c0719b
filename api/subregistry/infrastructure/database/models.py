"""
Modelos de base de datos (ORM).
"""
from sqlalchemy import Column, String, Integer, DateTime, Text, JSON, Boolean, Index
from sqlalchemy.sql import func

from subregistry.infrastructure.database.session import Base
from subregistry.shared.constants.registry_constants import (
    DEFAULT_SYNC_SOURCE,
    ServerStatus,
    Visibility,
)
from subregistry.shared.utils.datetime_utils import DateTimeUtils


class ServerModel(Base):
    """
    Una version de un servidor tal como la publica upstream.

    Campos de upstream: se reemplazan completos en cada sync.
    Campos locales (version_registry_meta, visibility): solo los escribe
    la superficie de administracion; el sync nunca los actualiza.
    """

    __tablename__ = "servers"

    name = Column(String(200), primary_key=True)
    version = Column(String(255), primary_key=True)
    description = Column(Text, nullable=False)
    status = Column(String(32), nullable=False, default=ServerStatus.ACTIVE.value)
    is_latest = Column(Boolean, nullable=False, default=False)
    repository = Column(JSON, nullable=True)
    website_url = Column(Text, nullable=True)
    packages = Column(JSON, nullable=True)
    remotes = Column(JSON, nullable=True)
    publisher_meta = Column(JSON, nullable=False, default=dict)
    parent_registry_meta = Column(JSON, nullable=False, default=dict)

    # Campos locales
    version_registry_meta = Column(JSON, nullable=False, default=dict)
    visibility = Column(String(16), nullable=False, default=Visibility.DRAFT.value)

    published_at = Column(DateTime(timezone=True), nullable=False, default=DateTimeUtils.now_utc)
    source = Column(String(64), nullable=False, default=DEFAULT_SYNC_SOURCE)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        Index("servers_status_idx", "status"),
        Index("servers_source_idx", "source"),
        Index("servers_latest_idx", "name", "is_latest"),
        Index("servers_name_idx", "name"),
        Index("servers_published_idx", "name", "published_at"),
        Index("servers_visibility_idx", "visibility"),
    )

    def __repr__(self):
        return f"<Server(name={self.name}, version={self.version}, latest={self.is_latest})>"


class PackageMetadataModel(Base):
    """
    Enriquecimiento local por nombre de servidor (todas sus versiones).
    El sync nunca escribe esta tabla.
    """

    __tablename__ = "package_metadata"

    name = Column(String(200), primary_key=True)
    registry_meta = Column(JSON, nullable=False, default=dict)
    visibility = Column(String(16), nullable=False, default=Visibility.DRAFT.value)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        Index("pkg_meta_name_idx", "name"),
        Index("pkg_meta_visibility_idx", "visibility"),
    )

    def __repr__(self):
        return f"<PackageMetadata(name={self.name}, visibility={self.visibility})>"


class SyncLogModel(Base):
    """
    Historial append-only de corridas de sincronizacion.
    La ultima corrida exitosa por `source` define el watermark incremental.
    """

    __tablename__ = "sync_log"

    id = Column(Integer, primary_key=True, autoincrement=True)
    source = Column(String(64), nullable=False, index=True)
    status = Column(String(16), nullable=False)
    servers_processed = Column(Integer, nullable=False, default=0)
    error_message = Column(Text, nullable=True)
    synced_at = Column(DateTime(timezone=True), nullable=False, default=DateTimeUtils.now_utc)

    def __repr__(self):
        return f"<SyncLog(id={self.id}, source={self.source}, status={self.status})>"
