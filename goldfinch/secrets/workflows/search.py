"""Two-level substring search over secret identifiers and keys."""
from enum import Enum
from typing import List

from ..domains.errors import NoMatches
from ..domains.models import Match, MatchKind, SecretStore


class LabelFormat(Enum):
    """How key-level matches are labelled."""
    QUALIFIED = "qualified"  # "<identifier>/<key>"
    BARE = "bare"  # "<key>"


def search_secrets(
    store: SecretStore,
    pattern: str,
    label_format: LabelFormat = LabelFormat.QUALIFIED,
) -> List[Match]:
    """
    Find identifiers and keys containing ``pattern``.

    Matching is literal, case-sensitive substring containment, so an empty
    pattern matches everything. Results follow identifier order; within an
    identifier the secret-level match comes first, then keys in order.

    Raises:
        NoMatches: If nothing matched. In bare mode over a single secret,
            the error names that secret.
    """
    matches = []
    for record in store:
        if pattern in record.identifier:
            matches.append(Match(
                label=f"[Secret] {record.identifier}",
                display=f"{len(record)} keys",
                kind=MatchKind.SECRET,
            ))

        for key, value in record.items():
            if pattern not in key:
                continue
            if label_format is LabelFormat.BARE:
                label = key
            else:
                label = f"{record.identifier}/{key}"
            matches.append(Match(label=label, display=value.render(), kind=MatchKind.KEY))

    if not matches:
        identifiers = store.identifiers()
        if label_format is LabelFormat.BARE and len(identifiers) == 1:
            raise NoMatches(pattern, identifiers[0])
        raise NoMatches(pattern)

    return matches
