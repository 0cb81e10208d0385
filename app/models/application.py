"""Application models.

- Application: a license/exam case tracked for a nursing professional.
  Besides its own workflow fields it carries two independent placements:
  one on a Board (board_id / board_list_id / board_position) and one on a
  Service (service_id / service_stage_id / service_position).
- ApplicationTimeline: append-only history entries shown on the case page.

Placement invariant (per family): a lane id implies the matching container
id, and no container means no lane and position 0.
"""

import uuid

from app.extensions import db


class Application(db.Model):
    __tablename__ = "applications"

    NUMBER_PREFIX = "NASYA"

    # -- Valid priorities --
    PRIORITIES = ["low", "normal", "high", "urgent"]

    # -- Workflow statuses (display order) --
    STATUSES = [
        "draft",
        "submitted",
        "under-review",
        "processing",
        "approved",
        "rejected",
        "completed",
        "cancelled",
    ]

    id = db.Column(
        db.String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    application_number = db.Column(db.String(32), unique=True, nullable=False)
    user_id = db.Column(
        db.String(36), db.ForeignKey("users.id"), nullable=False, index=True
    )
    title = db.Column(db.String(255), nullable=False)
    status = db.Column(db.String(50), default="draft", nullable=False)
    priority = db.Column(db.String(20), default="normal", nullable=False)
    due_date = db.Column(db.Date, nullable=True)
    is_starred = db.Column(db.Boolean, default=False, nullable=False)
    is_archived = db.Column(db.Boolean, default=False, nullable=False)

    # --- Board placement ---
    board_id = db.Column(
        db.String(36), db.ForeignKey("boards.id", ondelete="SET NULL"), nullable=True
    )
    board_list_id = db.Column(
        db.String(36),
        db.ForeignKey("board_lists.id", ondelete="SET NULL"),
        nullable=True,
    )
    board_position = db.Column(db.Integer, nullable=False, default=0)

    # --- Service placement ---
    service_id = db.Column(
        db.String(36), db.ForeignKey("services.id", ondelete="SET NULL"), nullable=True
    )
    service_stage_id = db.Column(
        db.String(36),
        db.ForeignKey("service_stages.id", ondelete="SET NULL"),
        nullable=True,
    )
    service_position = db.Column(db.Integer, nullable=False, default=0)

    created_at = db.Column(
        db.DateTime(timezone=True), server_default=db.func.now()
    )
    updated_at = db.Column(
        db.DateTime(timezone=True),
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    __table_args__ = (
        db.Index(
            "ix_applications_board_placement",
            "board_id", "board_list_id", "board_position",
        ),
        db.Index(
            "ix_applications_service_placement",
            "service_id", "service_stage_id", "service_position",
        ),
    )

    # --- Relationships ---
    owner = db.relationship("User", back_populates="applications")
    timeline = db.relationship(
        "ApplicationTimeline",
        back_populates="application",
        lazy="dynamic",
        order_by="ApplicationTimeline.created_at.desc()",
        cascade="all, delete-orphan",
    )

    def __repr__(self):
        return f"<Application {self.application_number} ({self.status})>"


class ApplicationTimeline(db.Model):
    __tablename__ = "application_timeline"

    id = db.Column(
        db.String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    application_id = db.Column(
        db.String(36),
        db.ForeignKey("applications.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id = db.Column(
        db.String(36), db.ForeignKey("users.id"), nullable=True
    )
    action = db.Column(db.String(100), nullable=False)  # e.g. "lane_changed"
    description = db.Column(db.String(500), nullable=False)
    metadata_ = db.Column("metadata", db.JSON, default=dict)
    created_at = db.Column(
        db.DateTime(timezone=True), server_default=db.func.now()
    )

    # --- Relationships ---
    application = db.relationship("Application", back_populates="timeline")
    user = db.relationship("User")

    def __repr__(self):
        return f"<ApplicationTimeline {self.action} app={self.application_id}>"
