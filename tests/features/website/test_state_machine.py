"""Tests for the website setup transition function."""

import pytest

from namesdao_wallet.features.website.state_machine import (
    STEP_LABELS,
    AssignmentConfirmed,
    AssignmentRequested,
    AssignmentSubmissionFailed,
    ConfigRequested,
    ConfigSubmissionFailed,
    IdentityConfirmed,
    IdentityRequested,
    IdentitySubmissionFailed,
    OwnershipObserved,
    SecondConfigConfirmed,
    SecondConfigSubmitted,
    SetupStep,
    initial_step,
    step_index,
    transition,
)

S = SetupStep


class TestHappyPath:
    def test_full_walkthrough(self):
        events = [
            IdentityRequested(),
            IdentityConfirmed(),
            AssignmentRequested("did:chia:1abc"),
            AssignmentConfirmed(),
            ConfigRequested("example.com"),
            SecondConfigSubmitted(),
            SecondConfigConfirmed(),
        ]
        step = S.CREATE_IDENTITY
        visited = [step]
        for event in events:
            step = transition(step, event)
            visited.append(step)

        assert visited == [
            S.CREATE_IDENTITY,
            S.CONFIRM_IDENTITY,
            S.ASSIGN_NAME,
            S.CONFIRM_ASSIGN,
            S.CONFIGURE_WEBSITE,
            S.CONFIRM_CONFIG_1,
            S.CONFIRM_CONFIG_2,
            S.COMPLETE,
        ]


class TestFailures:
    @pytest.mark.parametrize(
        "step, event, expected",
        [
            (S.CONFIRM_IDENTITY, IdentitySubmissionFailed("boom"), S.CREATE_IDENTITY),
            (S.CONFIRM_ASSIGN, AssignmentSubmissionFailed("boom"), S.ASSIGN_NAME),
            (S.CONFIRM_CONFIG_1, ConfigSubmissionFailed("boom"), S.CONFIGURE_WEBSITE),
        ],
    )
    def test_submission_failure_reverts(self, step, event, expected):
        assert transition(step, event) is expected

    @pytest.mark.parametrize(
        "step, event",
        [
            (S.CREATE_IDENTITY, IdentityConfirmed()),
            (S.ASSIGN_NAME, AssignmentConfirmed()),
            (S.COMPLETE, ConfigRequested("example.com")),
            (S.CONFIRM_CONFIG_2, SecondConfigSubmitted()),
            (S.CONFIRM_CONFIG_1, SecondConfigConfirmed()),
        ],
    )
    def test_unlisted_pairs_are_ignored(self, step, event):
        assert transition(step, event) is step


class TestOwnershipObserved:
    def test_initial_step(self):
        assert initial_step(True, True) is S.CONFIGURE_WEBSITE
        assert initial_step(True, False) is S.CONFIGURE_WEBSITE
        assert initial_step(False, True) is S.ASSIGN_NAME
        assert initial_step(False, False) is S.CREATE_IDENTITY

    def test_existing_identity_skips_creation(self):
        assert transition(S.CREATE_IDENTITY, OwnershipObserved(False, True)) is S.ASSIGN_NAME

    def test_assigned_name_skips_to_configure(self):
        assert transition(S.ASSIGN_NAME, OwnershipObserved(True, True)) is S.CONFIGURE_WEBSITE

    def test_lost_ownership_leaves_configure(self):
        assert transition(S.CONFIGURE_WEBSITE, OwnershipObserved(False, True)) is S.ASSIGN_NAME

    @pytest.mark.parametrize("step", [S.CONFIRM_IDENTITY, S.CONFIRM_ASSIGN, S.CONFIRM_CONFIG_1, S.COMPLETE])
    def test_confirming_steps_are_not_interrupted(self, step):
        assert transition(step, OwnershipObserved(False, False)) is step


class TestProgress:
    def test_step_index(self):
        assert [step_index(step) for step in S] == [0, 0, 1, 1, 2, 2, 2, 2]
        assert len(STEP_LABELS) == 3

    def test_is_confirming(self):
        assert S.CONFIRM_ASSIGN.is_confirming is True
        assert S.ASSIGN_NAME.is_confirming is False
