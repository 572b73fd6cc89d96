"""Ring tone inference from name/title wording, with role-vote fallback."""

import re

from famgraph.models import AMBIGUOUS, BLUE, ORANGE, RoleVote

MALE_WORDS = frozenset(
    {
        "king", "prince", "duke", "archduke", "grand duke", "lord", "sir", "mr", "earl",
        "baron", "viscount", "marquess", "count", "emperor", "tsar", "czar", "sultan",
        "father", "son", "brother", "husband", "uncle", "nephew", "grandfather", "grandson",
    }
)

FEMALE_WORDS = frozenset(
    {
        "queen", "princess", "duchess", "archduchess", "grand duchess", "lady", "dame", "mrs",
        "ms", "miss", "countess", "baroness", "viscountess", "marchioness", "empress",
        "tsarina", "czarina", "sultana", "mother", "daughter", "sister", "wife", "aunt",
        "niece", "grandmother", "granddaughter",
    }
)

WORD_RE = re.compile(r"[a-z]+")


def _words(text: str) -> set[str]:
    tokens = WORD_RE.findall(text.lower())
    pairs = {f"{a} {b}" for a, b in zip(tokens, tokens[1:])}
    return set(tokens) | pairs


def infer_tone(name: str, titles=()) -> str:
    """
    Guess a visual side from gender-coded wording in a name and titles.

    Returns "blue" or "orange" on an unambiguous match, else "ambiguous".
    """
    words = _words(" ".join([name, *titles]))
    male = bool(words & MALE_WORDS)
    female = bool(words & FEMALE_WORDS)
    if male and not female:
        return BLUE
    if female and not male:
        return ORANGE
    return AMBIGUOUS


def tone_from_votes(vote: RoleVote | None) -> str:
    """First-partner slots lean blue, second-partner slots lean orange; ties are blue."""
    if vote is not None and vote.second > vote.first:
        return ORANGE
    return BLUE


def ring_tone(name: str, titles=(), vote: RoleVote | None = None) -> str:
    tone = infer_tone(name, titles)
    if tone != AMBIGUOUS:
        return tone
    return tone_from_votes(vote)
