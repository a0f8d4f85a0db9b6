"""Genre inference from a user's top artists."""

from collections.abc import Iterable


def most_frequent_genre(genres: Iterable[str]) -> str | None:
    """Return the most frequent genre, or None for an empty input.

    On a tie the winner is the genre that reached the maximum count first, in
    order of first occurrence:

        >>> most_frequent_genre(["hip-hop", "rap", "pop", "pop", "rnb"])
        'pop'
        >>> most_frequent_genre(["rock", "jazz"])
        'rock'
    """
    counts: dict[str, int] = {}
    for genre in genres:
        counts[genre] = counts.get(genre, 0) + 1

    best: str | None = None
    best_count = 0
    # dicts keep insertion order, so iteration is first-occurrence order
    for genre, count in counts.items():
        if count > best_count:
            best, best_count = genre, count
    return best
