"""
Job status state machine.

    pending -> generating_code -> code_generated -> creating_repo
            -> pushing_code -> deploying -> deployed

`failed` is reachable from every non-terminal state and absorbs.
"""
from typing import Dict, FrozenSet
from pagefactory.core.errors import InvalidStatusTransition
from pagefactory.models.job import JobStatus

STATUS_ORDER = [
    JobStatus.PENDING,
    JobStatus.GENERATING_CODE,
    JobStatus.CODE_GENERATED,
    JobStatus.CREATING_REPO,
    JobStatus.PUSHING_CODE,
    JobStatus.DEPLOYING,
    JobStatus.DEPLOYED,
]


def _build_transitions() -> Dict[JobStatus, FrozenSet[JobStatus]]:
    table = {}
    for current, following in zip(STATUS_ORDER, STATUS_ORDER[1:]):
        table[current] = frozenset({following, JobStatus.FAILED})
    table[JobStatus.DEPLOYED] = frozenset()
    table[JobStatus.FAILED] = frozenset()
    return table


TRANSITIONS = _build_transitions()


def check_transition(current: JobStatus, target: JobStatus) -> None:
    if target not in TRANSITIONS[current]:
        raise InvalidStatusTransition(
            f"Cannot move job from '{current.value}' to '{target.value}'"
        )


def status_rank(status: JobStatus) -> int:
    """Position in the forward order; failed ranks after everything."""
    if status == JobStatus.FAILED:
        return len(STATUS_ORDER)
    return STATUS_ORDER.index(status)
