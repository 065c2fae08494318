from ballotbox.extensions import db


class Post(db.Model):
    __tablename__ = "posts"

    id = db.Column(db.Integer, primary_key=True)
    election_id = db.Column(db.Integer, db.ForeignKey("elections.id"), nullable=False)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=True)

    election = db.relationship("Election", back_populates="posts")
    candidates = db.relationship("Candidate", backref="post", lazy=True)
    votes = db.relationship("Vote", backref="post", lazy=True)
