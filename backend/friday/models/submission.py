"""Submission database model."""

from sqlalchemy import Column, Index, Integer, String

from friday.models.base import Base, TimestampMixin

INSTANCE_ID_PATTERN = r"^friday-[a-zA-Z0-9]+$"
UNKNOWN_LABEL = "unknown"

# Fields a resubmission replaces. The lookup key and created_at are never in here.
MUTABLE_FIELDS = (
    "instance_id",
    "handle",
    "score",
    "os",
    "arch",
    "timestamp",
    "network_score",
    "perm_score",
    "gateway_score",
    "channel_score",
    "skill_score",
    "ip_address",
    "user_agent",
)


class Submission(Base, TimestampMixin):
    """One participant's latest leaderboard submission."""

    __tablename__ = "submissions"

    id = Column(Integer, primary_key=True, autoincrement=True)

    # Identity
    instance_id = Column(String, nullable=False)
    handle = Column(String, nullable=True)

    # Scores
    score = Column(Integer, nullable=False)
    network_score = Column(Integer, nullable=False, default=0)
    perm_score = Column(Integer, nullable=False, default=0)
    gateway_score = Column(Integer, nullable=False, default=0)
    channel_score = Column(Integer, nullable=False, default=0)
    skill_score = Column(Integer, nullable=False, default=0)

    # Client-reported environment
    os = Column(String, nullable=True, default=UNKNOWN_LABEL)
    arch = Column(String, nullable=True, default=UNKNOWN_LABEL)
    timestamp = Column(String, nullable=False, comment="Client-supplied ISO-8601 time")

    # Captured server-side
    ip_address = Column(String, nullable=True)
    user_agent = Column(String, nullable=True)

    __table_args__ = (
        Index("uq_submissions_instance_id", "instance_id", unique=True),
        Index("uq_submissions_handle", "handle", unique=True),
        Index("idx_submissions_score", score.desc()),
        Index("idx_submissions_timestamp", "timestamp"),
        Index("idx_submissions_ip_recent", "ip_address", "updated_at"),
    )

    def to_dict(self, include_private: bool = False) -> dict:
        """Serialize the row; client address and agent only when asked."""
        data = {
            "id": self.id,
            "instance_id": self.instance_id,
            "handle": self.handle,
            "score": self.score,
            "os": self.os,
            "arch": self.arch,
            "timestamp": self.timestamp,
            "network_score": self.network_score,
            "perm_score": self.perm_score,
            "gateway_score": self.gateway_score,
            "channel_score": self.channel_score,
            "skill_score": self.skill_score,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
        if include_private:
            data["ip_address"] = self.ip_address
            data["user_agent"] = self.user_agent
        return data

    def __repr__(self) -> str:
        return f"<Submission {self.instance_id} ({self.score})>"
