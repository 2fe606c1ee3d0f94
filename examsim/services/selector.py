"""Quota-weighted, uniqueness-guaranteed question selection.

Uniqueness comes from sampling without replacement over disjoint per-domain
pools; no deduplication happens afterwards. All randomness flows through the
caller's random.Random so a stored seed reproduces a draw exactly.
"""

import random
from collections.abc import Mapping, Sequence

from examsim.core.app_exceptions import InsufficientQuestionsError
from examsim.core.logging import get_logger
from examsim.models.question import Domain, Question

logger = get_logger(__name__)


def round_half_up(numerator: int, denominator: int) -> int:
    """Integer division rounding .5 upwards (non-negative inputs)."""
    return (2 * numerator + denominator) // (2 * denominator)


def allocate_quotas(
    total: int,
    domains: Sequence[Domain],
    percentages: Mapping[Domain, int],
) -> dict[Domain, int]:
    """
    Split total across domains by percentage.

    quota(d) = round_half_up(total * P[d] / 100), in caller order; domains
    missing from percentages get 0. The first domain absorbs the rounding
    remainder in both directions: a shortfall is added to it, an excess is
    taken from it (never below zero, spilling to the following domains),
    so the quotas always sum to exactly total.

    Args:
        total: Requested question count
        domains: Eligible domains, order meaningful
        percentages: Domain share of the exam, 0-100 each

    Returns:
        Ordered mapping domain -> quota
    """
    quotas = {
        domain: round_half_up(total * percentages.get(domain, 0), 100) for domain in domains
    }
    allocated = sum(quotas.values())

    if allocated < total:
        quotas[domains[0]] += total - allocated
    elif allocated > total:
        excess = allocated - total
        for domain in domains:
            take = min(excess, quotas[domain])
            quotas[domain] -= take
            excess -= take
            if excess == 0:
                break

    return quotas


def select_questions(
    pools: Mapping[Domain, Sequence[Question]],
    total: int,
    domains: Sequence[Domain],
    percentages: Mapping[Domain, int] | None,
    rng: random.Random,
) -> list[Question]:
    """
    Draw total distinct questions from per-domain pools.

    Args:
        pools: Domain-pure question pools, each in a stable order
        total: Requested question count (positive)
        domains: Eligible domains (non-empty, order meaningful)
        percentages: Optional per-domain share; None or empty draws uniformly
        rng: Seeded random source

    Returns:
        Exactly total questions in delivery order

    Raises:
        InsufficientQuestionsError: If the pools cannot supply total questions
    """
    if total < 1:
        raise ValueError("total must be positive")
    if not domains:
        raise ValueError("at least one domain is required")

    if percentages:
        shuffled: dict[Domain, list[Question]] = {}
        for domain in domains:
            pool = list(pools.get(domain, ()))
            rng.shuffle(pool)
            shuffled[domain] = pool

        quotas = allocate_quotas(total, domains, percentages)
        logger.debug(
            "Domain quotas computed",
            extra={"total": total, "quotas": {d.value: q for d, q in quotas.items()}},
        )
        selected: list[Question] = []
        for domain in domains:
            pool = shuffled[domain]
            needed = quotas[domain]
            if needed > len(pool):
                logger.warning(
                    f"Domain {domain.value} short of questions: need {needed}, have {len(pool)}"
                )
            selected.extend(pool[:needed])
        # Remove domain-block ordering
        rng.shuffle(selected)
    else:
        union = [question for domain in domains for question in pools.get(domain, ())]
        rng.shuffle(union)
        selected = union[:total]

    if len(selected) < total:
        raise InsufficientQuestionsError(requested=total, available=len(selected))

    return selected
