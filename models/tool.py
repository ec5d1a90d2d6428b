"""Tool listing and tool image models."""

from datetime import datetime

from . import db


class Tool(db.Model):
    """A tool offered for sharing by its owner."""

    __tablename__ = "tools"

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    location = db.Column(db.String(255), nullable=True)
    user_manual_path = db.Column(db.String(255), nullable=True)
    user_id = db.Column(
        db.Integer,
        db.ForeignKey("users.id"),
        nullable=False,
        index=True,
    )
    created_at = db.Column(
        db.DateTime,
        nullable=False,
        default=datetime.utcnow,
        server_default=db.func.now(),
    )

    owner = db.relationship("User", back_populates="tools")
    images = db.relationship(
        "ToolImage",
        back_populates="tool",
        order_by="ToolImage.id",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def to_dict(self) -> dict:
        """Serialize the tool without its images."""

        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "location": self.location,
            "user_manual_path": self.user_manual_path,
            "user_id": self.user_id,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self) -> str:  # pragma: no cover - debugging helper
        return f"<Tool id={self.id} user_id={self.user_id} title={self.title!r}>"


class ToolImage(db.Model):
    """An original image uploaded for a tool; insertion order is display order."""

    __tablename__ = "tool_images"

    id = db.Column(db.Integer, primary_key=True)
    tool_id = db.Column(
        db.Integer,
        db.ForeignKey("tools.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    image_path = db.Column(db.String(255), nullable=False)

    tool = db.relationship("Tool", back_populates="images")

    def __repr__(self) -> str:  # pragma: no cover - debugging helper
        return f"<ToolImage id={self.id} tool_id={self.tool_id}>"
