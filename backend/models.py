from sqlalchemy import Column, String, Integer, Text, DateTime, JSON, ForeignKey, CheckConstraint, UniqueConstraint, Index
from sqlalchemy.orm import relationship
from datetime import datetime
import uuid
from database import Base
from constants import BlockType


def generate_uuid():
    return str(uuid.uuid4())


class Block(Base):
    """
    Versioned metadata block.

    The current state of a block lives on this row; every write also appends
    a BlockVersion snapshot so the revision history can be replayed.

    Settings keys for ModuleDto blocks:
    - name: internal identifier
    - dto_type: DtoType value
    - enabled: toggle (the only field a caller may flip on default DTOs)
    - related_entity_id: set on many-to-one relation DTOs
    - related_field_id: set on enum field DTOs (field permanent id)
    - properties / members: ordered lists, empty on default DTOs

    version is the compare-and-swap token: it starts at 1 and increases by
    one on every update.
    """
    __tablename__ = 'blocks'

    id = Column(String, primary_key=True, default=generate_uuid)
    resource_id = Column(String, nullable=False)
    parent_block_id = Column(String, nullable=True)  # Owning module
    block_type = Column(String, nullable=False, default=BlockType.MODULE_DTO.value)
    display_name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    settings = Column(JSON, nullable=False, default=dict)
    version = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    versions = relationship(
        "BlockVersion",
        back_populates="block",
        cascade="all, delete-orphan",
        order_by="BlockVersion.version_number",
    )

    __table_args__ = (
        CheckConstraint("display_name != ''"),
        CheckConstraint("version >= 1"),
        Index('idx_blocks_resource', 'resource_id'),
        Index('idx_blocks_parent', 'parent_block_id'),
    )


class BlockVersion(Base):
    """Snapshot of a block taken at every write."""
    __tablename__ = 'block_versions'

    id = Column(String, primary_key=True, default=generate_uuid)
    block_id = Column(String, ForeignKey('blocks.id', ondelete='CASCADE'), nullable=False)
    version_number = Column(Integer, nullable=False)
    display_name = Column(String, nullable=False)
    settings = Column(JSON, nullable=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    block = relationship("Block", back_populates="versions")

    __table_args__ = (
        UniqueConstraint('block_id', 'version_number', name='uq_block_version'),
    )
