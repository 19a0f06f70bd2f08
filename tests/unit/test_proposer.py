"""Unit tests for action scoring and proposal."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from conftest import FakePage, make_element, node, snapshot_payload

from uiscout.browser.proposer import (
    CANDIDATE_SELECTOR,
    DIALOG_CONTROL_SELECTOR,
    FALLBACK_SELECTOR,
    VETOED,
    Candidate,
    Vocabulary,
    propose,
    score,
)
from uiscout.browser.snapshot import DIALOG_SELECTOR
from uiscout.models.action import ActionKind, ProposalLabel
from uiscout.models.snapshot import Snapshot
from uiscout.settings.config import PolicySettings

DIALOG_SNAPSHOT = Snapshot.from_dict(snapshot_payload(dialogs=[{"tag": "DIV", "classes": "modal"}]))
PLAIN_SNAPSHOT = Snapshot.from_dict(snapshot_payload(nodes=[node("x")]))


# ---------------------------------------------------------------------------
# score
# ---------------------------------------------------------------------------


class TestScore:
    """Tests for the keyword scoring function."""

    @pytest.mark.parametrize("label", ["Delete project", "REMOVE member", "Archive", "Reset password"])
    def test_destructive_label_vetoed(self, label: str) -> None:
        assert score(Candidate(text=label, tag="BUTTON"), allow_destructive=False) == VETOED

    def test_veto_beats_every_bonus(self) -> None:
        candidate = Candidate(
            text="Save and delete draft",
            classes="btn-primary",
            tag="BUTTON",
            role="button",
        )
        assert score(candidate, allow_destructive=False, hints=["draft", "save"]) == -1

    def test_destructive_allowed_is_never_vetoed(self) -> None:
        assert score(Candidate(text="Delete"), allow_destructive=True) == 0
        assert score(Candidate(text="Delete", tag="BUTTON"), allow_destructive=True) == 1

    def test_verbs_add_two_each(self) -> None:
        assert score(Candidate(text="Create new project"), allow_destructive=False) == 4

    def test_verb_match_is_substring(self) -> None:
        # "address" contains "add", "renewal" contains "new"
        assert score(Candidate(text="Address renewal"), allow_destructive=False) == 4

    def test_aria_label_used_when_text_empty(self) -> None:
        assert score(Candidate(text="", aria_label="Settings"), allow_destructive=False) == 2

    def test_text_takes_precedence_over_aria_label(self) -> None:
        assert score(Candidate(text="Home", aria_label="Settings"), allow_destructive=False) == 0

    def test_case_insensitive(self) -> None:
        assert score(Candidate(text="SUBMIT"), allow_destructive=False) == 2

    def test_hints_add_three_each(self) -> None:
        candidate = Candidate(text="Invoices and billing")
        assert score(candidate, allow_destructive=False, hints=["invoice", "billing", "crm"]) == 6

    def test_button_bonus_from_tag_or_role(self) -> None:
        assert score(Candidate(text="Go", tag="BUTTON"), allow_destructive=False) == 1
        assert score(Candidate(text="Go", tag="DIV", role="button"), allow_destructive=False) == 1
        assert score(Candidate(text="Go", tag="A"), allow_destructive=False) == 0

    @pytest.mark.parametrize("classes", ["btn btn-primary", "CTA", "confirm-dialog", "form-submit"])
    def test_call_to_action_class_bonus(self, classes: str) -> None:
        assert score(Candidate(text="Go", classes=classes), allow_destructive=False) == 1

    def test_custom_vocabulary(self) -> None:
        vocab = Vocabulary(verbs=("launch",), destructive=("nuke",))
        assert score(Candidate(text="Launch"), False, vocabulary=vocab) == 2
        assert score(Candidate(text="Create"), False, vocabulary=vocab) == 0
        assert score(Candidate(text="Nuke it"), False, vocabulary=vocab) == -1
        assert score(Candidate(text="Delete"), False, vocabulary=vocab) == 0

    def test_vocabulary_from_policy_settings(self) -> None:
        vocab = Vocabulary.from_policy(PolicySettings(verbs=["Launch"], destructive=["Nuke"]))
        assert vocab.verbs == ("launch",)
        assert vocab.destructive == ("nuke",)


# ---------------------------------------------------------------------------
# propose
# ---------------------------------------------------------------------------


class TestProposeGlobal:
    """Tests for the page-wide best-control path."""

    def test_selects_create_over_hidden_delete(self) -> None:
        page = FakePage()
        create = make_element("Create Project")
        delete = make_element("Delete Project", box=(0, 0))
        page.selectors[CANDIDATE_SELECTOR] = [delete, create]

        action = propose(page, allow_destructive=False, snapshot=PLAIN_SNAPSHOT)

        assert action is not None
        assert action.element is create
        assert action.kind == ActionKind.CLICK
        assert action.label == ProposalLabel.BEST_VERB_MATCH
        assert action.score == 3

    def test_tiny_and_boxless_elements_ignored(self) -> None:
        page = FakePage()
        page.selectors[CANDIDATE_SELECTOR] = [
            make_element("Create", box=(1, 40)),
            make_element("Create", box=None),
        ]
        assert propose(page, allow_destructive=False, snapshot=PLAIN_SNAPSHOT) is None

    def test_highest_score_wins(self) -> None:
        page = FakePage()
        edit = make_element("Edit")
        save = make_element("Save changes", classes="btn-primary")
        page.selectors[CANDIDATE_SELECTOR] = [edit, save]

        action = propose(page, allow_destructive=False, snapshot=PLAIN_SNAPSHOT)

        assert action.element is save

    def test_ties_keep_first_in_document_order(self) -> None:
        page = FakePage()
        first = make_element("Next")
        second = make_element("Continue")
        page.selectors[CANDIDATE_SELECTOR] = [first, second]

        assert propose(page, allow_destructive=False, snapshot=PLAIN_SNAPSHOT).element is first

    def test_hint_steers_choice(self) -> None:
        page = FakePage()
        page.selectors[CANDIDATE_SELECTOR] = [make_element("Edit", tag="A"), make_element("Reports", tag="A")]

        action = propose(page, allow_destructive=False, hints=["report"], snapshot=PLAIN_SNAPSHOT)

        assert action.text == "Reports"

    def test_plain_link_scores_as_button(self) -> None:
        page = FakePage()
        about = make_element("About", tag="A")
        page.selectors[CANDIDATE_SELECTOR] = [about]

        action = propose(page, allow_destructive=False, snapshot=PLAIN_SNAPSHOT)

        assert action.element is about
        assert action.label == ProposalLabel.BEST_VERB_MATCH
        assert action.score == 1

    def test_link_ties_button_and_wins_on_document_order(self) -> None:
        page = FakePage()
        create = make_element("Create", tag="A")
        save = make_element("Save")
        page.selectors[CANDIDATE_SELECTOR] = [create, save]

        action = propose(page, allow_destructive=False, snapshot=PLAIN_SNAPSHOT)

        assert action.element is create
        assert action.score == 3

    def test_aria_label_names_unlabeled_input(self) -> None:
        page = FakePage()
        search = make_element("", tag="INPUT", aria_label="Filter issues")
        page.selectors[CANDIDATE_SELECTOR] = [search]

        action = propose(page, allow_destructive=False, snapshot=PLAIN_SNAPSHOT)

        assert action.text == "Filter issues"
        assert action.score == 3

    def test_only_vetoed_controls_returns_none(self) -> None:
        page = FakePage()
        page.selectors[CANDIDATE_SELECTOR] = [make_element("Delete", tag="A"), make_element("Reset")]
        assert propose(page, allow_destructive=False, snapshot=PLAIN_SNAPSHOT) is None

    def test_no_elements_returns_none(self) -> None:
        page = FakePage()
        assert propose(page, allow_destructive=False, snapshot=PLAIN_SNAPSHOT) is None

    def test_extracts_snapshot_when_not_given(self) -> None:
        page = FakePage(snapshot_payload(nodes=[node("Create")]))
        page.selectors[CANDIDATE_SELECTOR] = [make_element("Create")]

        action = propose(page, allow_destructive=False)

        assert action.label == ProposalLabel.BEST_VERB_MATCH


class TestProposeFallback:
    """Tests for the toggle fallback."""

    def test_fallback_menu_when_every_control_is_vetoed(self) -> None:
        page = FakePage()
        toggle = make_element("", tag="DIV")
        page.selectors[CANDIDATE_SELECTOR] = [make_element("Remove filter", tag="A")]
        page.selectors[FALLBACK_SELECTOR] = [toggle]

        action = propose(page, allow_destructive=False, snapshot=PLAIN_SNAPSHOT)

        assert action.element is toggle
        assert action.label == ProposalLabel.FALLBACK_MENU

    def test_fallback_ignores_score_veto(self) -> None:
        page = FakePage()
        toggle = make_element("Delete menu", tag="DIV")
        page.selectors[FALLBACK_SELECTOR] = [toggle]

        assert propose(page, allow_destructive=False, snapshot=PLAIN_SNAPSHOT).element is toggle


class TestProposeDialog:
    """Tests for the dialog-priority path."""

    def _dialog(self, *controls: MagicMock) -> MagicMock:
        container = MagicMock(name="dialog")
        container.query_selector_all.side_effect = (
            lambda sel: list(controls) if sel == DIALOG_CONTROL_SELECTOR else []
        )
        return container

    def test_dialog_control_preferred_over_better_page_control(self) -> None:
        page = FakePage()
        ok = make_element("OK")
        page.selectors[DIALOG_SELECTOR] = [self._dialog(ok)]
        page.selectors[CANDIDATE_SELECTOR] = [make_element("Create new project and save", classes="cta")]

        action = propose(page, allow_destructive=False, snapshot=DIALOG_SNAPSHOT)

        assert action.element is ok
        assert action.label == ProposalLabel.DIALOG_VERB_MATCH
        assert action.record_label == "OK"

    def test_forced_and_global_choices_record_their_label(self) -> None:
        page = FakePage()
        archive = make_element("Archive")
        page.selectors[DIALOG_SELECTOR] = [self._dialog(archive)]
        assert propose(page, False, snapshot=DIALOG_SNAPSHOT).record_label == "dialog-first-button"

        page = FakePage()
        page.selectors[CANDIDATE_SELECTOR] = [make_element("Create")]
        assert propose(page, False, snapshot=PLAIN_SNAPSHOT).record_label == "best-verb-match"

    def test_first_positive_dialog_control_chosen(self) -> None:
        page = FakePage()
        cancel = make_element("Cancel")
        apply = make_element("Apply")
        page.selectors[DIALOG_SELECTOR] = [self._dialog(cancel, apply)]

        # Every non-vetoed dialog control counts as a button, so "Cancel" already scores 1.
        assert propose(page, allow_destructive=False, snapshot=DIALOG_SNAPSHOT).element is cancel

    def test_vetoed_controls_skipped_for_positive_one(self) -> None:
        page = FakePage()
        delete = make_element("Delete")
        keep = make_element("Keep")
        page.selectors[DIALOG_SELECTOR] = [self._dialog(delete, keep)]

        assert propose(page, allow_destructive=False, snapshot=DIALOG_SNAPSHOT).element is keep

    def test_forced_choice_when_only_archive(self) -> None:
        page = FakePage()
        archive = make_element("Archive")
        page.selectors[DIALOG_SELECTOR] = [self._dialog(archive)]
        page.selectors[CANDIDATE_SELECTOR] = [make_element("Create")]

        action = propose(page, allow_destructive=False, snapshot=DIALOG_SNAPSHOT)

        assert action is not None
        assert action.element is archive
        assert action.label == ProposalLabel.DIALOG_FIRST_BUTTON

    def test_empty_dialog_falls_through_to_page(self) -> None:
        page = FakePage()
        create = make_element("Create")
        page.selectors[DIALOG_SELECTOR] = [self._dialog()]
        page.selectors[CANDIDATE_SELECTOR] = [create]

        action = propose(page, allow_destructive=False, snapshot=DIALOG_SNAPSHOT)

        assert action.element is create
        assert action.label == ProposalLabel.BEST_VERB_MATCH

    def test_dialog_in_snapshot_but_gone_from_page(self) -> None:
        page = FakePage()
        create = make_element("Create")
        page.selectors[CANDIDATE_SELECTOR] = [create]

        assert propose(page, allow_destructive=False, snapshot=DIALOG_SNAPSHOT).element is create

    def test_dialog_ignored_when_snapshot_has_none(self) -> None:
        page = FakePage()
        ok = make_element("OK")
        page.selectors[DIALOG_SELECTOR] = [self._dialog(ok)]

        assert propose(page, allow_destructive=False, snapshot=PLAIN_SNAPSHOT) is None
