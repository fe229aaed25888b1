from ..errors import InvalidStateError, ValidationError

TERMINAL_STATUSES = frozenset({"accepted", "rejected"})


def transition_interest(current: str, decision: str) -> str:
    if decision not in TERMINAL_STATUSES:
        raise ValidationError(f"decision must be one of: accepted, rejected (got {decision!r})")

    if current in TERMINAL_STATUSES:
        raise InvalidStateError(f"Interest has already been {current}")

    if current == "pending":
        return decision

    raise InvalidStateError(f"Unknown interest status {current!r}")


def canonical_pair(user_a: int, user_b: int) -> tuple[int, int]:
    return (min(user_a, user_b), max(user_a, user_b))
