from ballotbox.services import gateway


def list_dashboard_posts(user_id):
    """Posts of the active election, each flagged with the user's vote status."""
    elections = gateway.list_elections(active=True)
    if not elections:
        return {"election": None, "posts": [], "voted_post_ids": set()}

    election = elections[0]
    posts = gateway.list_posts(election.id)
    candidates = gateway.list_candidates([post.id for post in posts])
    voted_post_ids = {vote.post_id for vote in gateway.list_user_votes(user_id)}

    candidates_by_post = {}
    for candidate in candidates:
        candidates_by_post.setdefault(candidate.post_id, []).append(candidate)

    rows = [
        {
            "post": post,
            "candidates": candidates_by_post.get(post.id, []),
            "user_voted": post.id in voted_post_ids,
        }
        for post in posts
    ]

    return {"election": election, "posts": rows, "voted_post_ids": voted_post_ids}
