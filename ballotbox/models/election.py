from datetime import datetime, timezone

from ballotbox.extensions import db


def utcnow():
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Election(db.Model):
    __tablename__ = "elections"

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200), nullable=False)
    end_time = db.Column(db.DateTime, nullable=False)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    posts = db.relationship(
        "Post", back_populates="election", lazy=True, order_by="Post.title"
    )

    def has_ended(self, now=None):
        return (now or utcnow()) > self.end_time
