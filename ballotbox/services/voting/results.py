from ballotbox.errors import NotFound
from ballotbox.services import gateway


def tally_post_results(rows):
    """Turn per-candidate counts into percentages and a winner list.

    ``rows`` is what :func:`gateway.get_results` returns: one
    ``{"candidate", "vote_count"}`` dict per candidate of the post.
    """
    total_votes = sum(row["vote_count"] for row in rows)
    top_vote_count = max((row["vote_count"] for row in rows), default=0)

    candidates = []
    for row in rows:
        candidate = row["candidate"]
        count = row["vote_count"]
        percentage = round(count / total_votes * 100, 2) if total_votes > 0 else 0
        candidates.append(
            {
                "candidate_id": candidate.id,
                "name": candidate.name,
                "department": candidate.department,
                "image_url": candidate.image_url,
                "vote_count": count,
                "percentage": percentage,
            }
        )

    candidates.sort(
        key=lambda row: (-row["vote_count"], row["name"].lower(), row["candidate_id"])
    )

    winners = []
    if top_vote_count > 0:
        winners = [row for row in candidates if row["vote_count"] == top_vote_count]

    return {
        "total_votes": total_votes,
        "candidates": candidates,
        "winners": winners,
        "is_tie": len(winners) > 1,
        "top_vote_count": top_vote_count,
    }


def build_post_results(post_id):
    post = gateway.get_post_with_election(post_id)
    if post is None:
        raise NotFound("The results for this position are not available.")

    results = tally_post_results(gateway.get_results(post_id))
    results["post"] = post
    results["election"] = post.election
    return results
