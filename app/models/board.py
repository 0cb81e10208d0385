"""Board models.

- Board: a user's personal board of applications.
- BoardList: an ordered column on a board.

Applications reference a board through Application.board_id /
board_list_id / board_position. Deleting a board or list detaches its
applications; it never deletes them (see services/positioning.py).
"""

import uuid

from app.extensions import db


class Board(db.Model):
    __tablename__ = "boards"

    id = db.Column(
        db.String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    user_id = db.Column(
        db.String(36), db.ForeignKey("users.id"), nullable=False, index=True
    )
    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    color = db.Column(db.String(7), default="#3b82f6")  # hex color
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
    owner = db.relationship("User", back_populates="boards")
    lists = db.relationship(
        "BoardList",
        back_populates="board",
        cascade="all, delete-orphan",
        order_by="BoardList.position",
    )

    def __repr__(self):
        return f"<Board {self.name}>"


class BoardList(db.Model):
    __tablename__ = "board_lists"

    id = db.Column(
        db.String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    board_id = db.Column(
        db.String(36),
        db.ForeignKey("boards.id", ondelete="CASCADE"),
        nullable=False,
    )
    name = db.Column(db.String(255), nullable=False)
    color = db.Column(db.String(7), default="#6b7280")
    position = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(
        db.DateTime(timezone=True), server_default=db.func.now()
    )

    __table_args__ = (
        db.Index("ix_board_lists_board_position", "board_id", "position"),
    )

    # --- Relationships ---
    board = db.relationship("Board", back_populates="lists")

    def __repr__(self):
        return f"<BoardList {self.name} @{self.position}>"
