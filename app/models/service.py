"""Service models.

- Service: a processing pipeline (e.g. "NCLEX Registration") owned by a user.
- ServiceStage: an ordered stage within a service.

Same shape as Board/BoardList; applications reference a service through
Application.service_id / service_stage_id / service_position.
"""

import uuid

from app.extensions import db


class Service(db.Model):
    __tablename__ = "services"

    id = db.Column(
        db.String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    user_id = db.Column(
        db.String(36), db.ForeignKey("users.id"), nullable=False, index=True
    )
    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    color = db.Column(db.String(7), default="#3b82f6")
    is_starred = db.Column(db.Boolean, default=False, nullable=False)
    position = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(
        db.DateTime(timezone=True), server_default=db.func.now()
    )
    updated_at = db.Column(
        db.DateTime(timezone=True),
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    # --- Relationships ---
    owner = db.relationship("User", back_populates="services")
    stages = db.relationship(
        "ServiceStage",
        back_populates="service",
        cascade="all, delete-orphan",
        order_by="ServiceStage.position",
    )

    def __repr__(self):
        return f"<Service {self.name}>"


class ServiceStage(db.Model):
    __tablename__ = "service_stages"

    id = db.Column(
        db.String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    service_id = db.Column(
        db.String(36),
        db.ForeignKey("services.id", ondelete="CASCADE"),
        nullable=False,
    )
    name = db.Column(db.String(255), nullable=False)
    color = db.Column(db.String(7), default="#6b7280")
    position = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(
        db.DateTime(timezone=True), server_default=db.func.now()
    )

    __table_args__ = (
        db.Index("ix_service_stages_service_position", "service_id", "position"),
    )

    # --- Relationships ---
    service = db.relationship("Service", back_populates="stages")

    def __repr__(self):
        return f"<ServiceStage {self.name} @{self.position}>"
