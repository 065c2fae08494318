from ballotbox.services.voting.results import build_post_results, tally_post_results

__all__ = [
    "build_post_results",
    "tally_post_results",
]
