from ballotbox.extensions import db


class Candidate(db.Model):
    __tablename__ = "candidates"

    id = db.Column(db.Integer, primary_key=True)
    post_id = db.Column(db.Integer, db.ForeignKey("posts.id"), nullable=False)
    name = db.Column(db.String(200), nullable=False)
    bio = db.Column(db.Text, nullable=True)
    department = db.Column(db.String(200), nullable=True)
    image_url = db.Column(db.String(500), nullable=True)

    votes = db.relationship("Vote", backref="candidate", lazy=True)
