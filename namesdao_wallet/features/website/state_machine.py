"""Steps and transitions of the .xch.limo website setup workflow.

The workflow binds a name NFT to a DID profile and publishes a CNAME record
into the DID metadata::

    create-identity -> confirm-identity -> assign-name -> confirm-assign
        -> configure-website -> confirm-config-1 -> confirm-config-2 -> complete

``transition`` is pure: it never performs I/O. Pairs of step and event that
are not listed leave the step unchanged.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class SetupStep(str, Enum):
    CREATE_IDENTITY = "create-identity"
    CONFIRM_IDENTITY = "confirm-identity"
    ASSIGN_NAME = "assign-name"
    CONFIRM_ASSIGN = "confirm-assign"
    CONFIGURE_WEBSITE = "configure-website"
    CONFIRM_CONFIG_1 = "confirm-config-1"
    CONFIRM_CONFIG_2 = "confirm-config-2"
    COMPLETE = "complete"

    @property
    def is_confirming(self) -> bool:
        return self in CONFIRMATION_STEPS


CONFIRMATION_STEPS = frozenset(
    {
        SetupStep.CONFIRM_IDENTITY,
        SetupStep.CONFIRM_ASSIGN,
        SetupStep.CONFIRM_CONFIG_1,
        SetupStep.CONFIRM_CONFIG_2,
    }
)

STEP_LABELS = ("Create Profile", "Assign Name", "Configure Website")


@dataclass(frozen=True)
class IdentityRequested:
    pass


@dataclass(frozen=True)
class IdentitySubmissionFailed:
    message: str = ""


@dataclass(frozen=True)
class IdentityConfirmed:
    pass


@dataclass(frozen=True)
class AssignmentRequested:
    did_id: str = ""


@dataclass(frozen=True)
class AssignmentSubmissionFailed:
    message: str = ""


@dataclass(frozen=True)
class AssignmentConfirmed:
    pass


@dataclass(frozen=True)
class ConfigRequested:
    host: str = ""


@dataclass(frozen=True)
class ConfigSubmissionFailed:
    message: str = ""


@dataclass(frozen=True)
class SecondConfigSubmitted:
    pass


@dataclass(frozen=True)
class SecondConfigConfirmed:
    pass


@dataclass(frozen=True)
class OwnershipObserved:
    owned: bool
    has_identities: bool


SetupEvent = (
    IdentityRequested
    | IdentitySubmissionFailed
    | IdentityConfirmed
    | AssignmentRequested
    | AssignmentSubmissionFailed
    | AssignmentConfirmed
    | ConfigRequested
    | ConfigSubmissionFailed
    | SecondConfigSubmitted
    | SecondConfigConfirmed
    | OwnershipObserved
)

_TRANSITIONS: dict[tuple[SetupStep, type], SetupStep] = {
    (SetupStep.CREATE_IDENTITY, IdentityRequested): SetupStep.CONFIRM_IDENTITY,
    (SetupStep.CONFIRM_IDENTITY, IdentitySubmissionFailed): SetupStep.CREATE_IDENTITY,
    (SetupStep.CONFIRM_IDENTITY, IdentityConfirmed): SetupStep.ASSIGN_NAME,
    (SetupStep.ASSIGN_NAME, AssignmentRequested): SetupStep.CONFIRM_ASSIGN,
    (SetupStep.CONFIRM_ASSIGN, AssignmentSubmissionFailed): SetupStep.ASSIGN_NAME,
    (SetupStep.CONFIRM_ASSIGN, AssignmentConfirmed): SetupStep.CONFIGURE_WEBSITE,
    (SetupStep.CONFIGURE_WEBSITE, ConfigRequested): SetupStep.CONFIRM_CONFIG_1,
    (SetupStep.CONFIRM_CONFIG_1, ConfigSubmissionFailed): SetupStep.CONFIGURE_WEBSITE,
    (SetupStep.CONFIRM_CONFIG_1, SecondConfigSubmitted): SetupStep.CONFIRM_CONFIG_2,
    (SetupStep.CONFIRM_CONFIG_2, SecondConfigConfirmed): SetupStep.COMPLETE,
}


def initial_step(owned_by_user: bool, has_identities: bool) -> SetupStep:
    """Entry step derived from chain state, so reopening resumes the workflow."""
    if owned_by_user:
        return SetupStep.CONFIGURE_WEBSITE
    if has_identities:
        return SetupStep.ASSIGN_NAME
    return SetupStep.CREATE_IDENTITY


def _observe_ownership(step: SetupStep, event: OwnershipObserved) -> SetupStep:
    if step in (SetupStep.CREATE_IDENTITY, SetupStep.ASSIGN_NAME):
        return initial_step(event.owned, event.has_identities)
    if step is SetupStep.CONFIGURE_WEBSITE and not event.owned:
        return initial_step(False, event.has_identities)
    return step


def transition(step: SetupStep, event: SetupEvent) -> SetupStep:
    if isinstance(event, OwnershipObserved):
        return _observe_ownership(step, event)
    return _TRANSITIONS.get((step, type(event)), step)


def step_index(step: SetupStep) -> int:
    """Index into ``STEP_LABELS`` for progress display."""
    if step in (SetupStep.CREATE_IDENTITY, SetupStep.CONFIRM_IDENTITY):
        return 0
    if step in (SetupStep.ASSIGN_NAME, SetupStep.CONFIRM_ASSIGN):
        return 1
    return 2
