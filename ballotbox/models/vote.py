from ballotbox.extensions import db
from ballotbox.models.election import utcnow


class Vote(db.Model):
    __tablename__ = "votes"
    # The only authoritative duplicate guard: one vote per user per post.
    __table_args__ = (
        db.UniqueConstraint("user_id", "post_id", name="uq_votes_user_post"),
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    post_id = db.Column(db.Integer, db.ForeignKey("posts.id"), nullable=False)
    candidate_id = db.Column(db.Integer, db.ForeignKey("candidates.id"), nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
