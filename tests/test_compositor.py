"""Tests for document composition"""

from datetime import date

import pytest

from legal_forms.errors import TemplateNotFoundError, UnsupportedTemplateError
from legal_forms.models.template import DocumentTemplate
from legal_forms.services.compositor import (
    DISTRIBUTION_BLANK_LINE,
    DocumentCompositor,
)
from legal_forms.services.layout import BLANK, BlockKind
from legal_forms.services.registry import TemplateRegistry


@pytest.fixture
def compositor(registry):
    return DocumentCompositor(registry)


def _blocks(composed):
    return [block for page in composed.pages for block in page.blocks]


def _flat(composed) -> str:
    """Laid-out text with line breaks folded into spaces"""
    return " ".join(composed.text.split())


def _block_after(composed, text):
    blocks = _blocks(composed)
    for index, block in enumerate(blocks):
        if text in " ".join(block.text.split()):
            return block, blocks[index + 1]
    raise AssertionError(f"{text!r} not laid out")


class TestCompose:

    def test_purchase_agreement_scenario(self, compositor, purchase_data):
        composed = compositor.compose("purchase-agreement", purchase_data)
        assert composed.buffer.startswith(b"%PDF")
        assert composed.page_count >= 1
        assert "$500,000.00" in _flat(composed)
        assert "2024-06-01" in _flat(composed)
        assert b"$500,000.00" in composed.buffer
        assert b"2024-06-01" in composed.buffer

    def test_unknown_template(self, compositor):
        with pytest.raises(TemplateNotFoundError):
            compositor.compose("no-such-form", {})

    def test_template_without_routine(self):
        template = DocumentTemplate.model_validate({
            "id": "lead-paint-disclosure",
            "name": "Lead Paint Disclosure",
            "description": "",
            "category": "disclosure",
            "fields": [{"id": "a", "name": "a", "label": "A", "type": "text"}],
        })
        compositor = DocumentCompositor(TemplateRegistry([template]))
        assert not compositor.supports("lead-paint-disclosure")
        with pytest.raises(UnsupportedTemplateError, match="lead-paint-disclosure"):
            compositor.compose("lead-paint-disclosure", {"a": "x"})

    def test_deterministic(self, compositor, purchase_data):
        first = compositor.compose("purchase-agreement", purchase_data, generated_on=date(2024, 5, 1))
        second = compositor.compose("purchase-agreement", purchase_data, generated_on=date(2024, 5, 1))
        assert first.buffer == second.buffer

    def test_file_name(self, compositor, termination_data):
        composed = compositor.compose("termination-letter", termination_data,
                                      generated_on=date(2024, 6, 1))
        assert composed.file_name == "Letter_of_Termination_of_Purchase_and_Sale_2024-06-01.pdf"
        named = compositor.compose("termination-letter", termination_data, file_name="kept.pdf")
        assert named.file_name == "kept.pdf"

    def test_does_not_mutate_data(self, compositor, purchase_data):
        before = dict(purchase_data)
        compositor.compose("purchase-agreement", purchase_data)
        assert purchase_data == before

    def test_empty_record_uses_placeholders(self, compositor):
        composed = compositor.compose("purchase-agreement", {})
        assert f"A. SELLER - The seller is: {BLANK}" in _flat(composed)
        assert "in the State of New York" in _flat(composed)
        assert "No specific items listed." in _flat(composed)

    def test_blocks_never_split(self, compositor, purchase_data):
        purchase_data.update({
            "mortgageAmount": 400000,
            "itemsIncluded": "Refrigerator, stove, washer and dryer. " * 60,
            "structuralInspection": True,
            "radonInspection": True,
            "inspectionDate": "2024-05-15",
        })
        composed = compositor.compose("purchase-agreement", purchase_data)
        assert composed.page_count > 1
        for block in _blocks(composed):
            assert block.bottom <= 280 or block.y == 20


class TestPurchaseAgreement:

    def test_mortgage_clause_only_with_amount(self, compositor, purchase_data):
        composed = compositor.compose("purchase-agreement", purchase_data)
        assert "No mortgage contingency specified." in _flat(composed)

        purchase_data.update({
            "mortgageAmount": 400000,
            "mortgageTerm": 30,
            "interestRate": 6.5,
            "mortgageType": "FHA",
            "businessDaysToApply": 5,
        })
        composed = compositor.compose("purchase-agreement", purchase_data)
        assert "No mortgage contingency specified." not in _flat(composed)
        assert "approval of a FHA mortgage loan of $400,000.00" in _flat(composed)
        assert "not to exceed 6.5% (percent)" in _flat(composed)

    def test_seller_contribution_needs_mortgage(self, compositor, purchase_data):
        purchase_data["sellerContribution"] = 5000
        composed = compositor.compose("purchase-agreement", purchase_data)
        assert "Seller's Contribution" not in _flat(composed)

        purchase_data["mortgageAmount"] = 400000
        composed = compositor.compose("purchase-agreement", purchase_data)
        assert "Seller's Contribution" in _flat(composed)
        assert "$5,000.00" in _flat(composed)

    def test_inspections_only_when_selected(self, compositor, purchase_data):
        composed = compositor.compose("purchase-agreement", purchase_data)
        assert "21. INSPECTIONS" not in _flat(composed)

        purchase_data["radonInspection"] = True
        purchase_data["pestInspection"] = False
        composed = compositor.compose("purchase-agreement", purchase_data)
        assert "21. INSPECTIONS" in _flat(composed)
        assert "RADON INSPECTION" in _flat(composed)
        assert "PEST, TERMITE" not in _flat(composed)
        assert composed.text.count("[X]") == 1

    def test_omitted_clause_leaves_no_gap(self, compositor, purchase_data):
        composed = compositor.compose("purchase-agreement", purchase_data)
        transfer, following = _block_after(composed, "The closing will be on or before")
        assert following.kind == BlockKind.SUBTITLE
        assert following.text == "SIGNATURES"
        if following.page == transfer.page:
            # skip(10) then the section's own leading gap
            assert following.y == transfer.bottom + 15

    def test_item_list_rendered_as_text(self, compositor, purchase_data):
        purchase_data["itemsIncluded"] = ["stove", "fridge"]
        composed = compositor.compose("purchase-agreement", purchase_data)
        assert "stove, fridge" in _flat(composed)
        assert "['stove'" not in _flat(composed)

    def test_four_signature_lines(self, compositor, purchase_data):
        composed = compositor.compose("purchase-agreement", purchase_data)
        signatures = [b for b in _blocks(composed) if b.kind == BlockKind.SIGNATURE]
        assert [b.label for b in signatures] == ["Purchaser", "Purchaser", "Seller", "Seller"]


class TestTerminationLetter:

    def test_empty_distribution_gives_four_blank_lines(self, compositor, termination_data):
        termination_data["distributionDetails"] = ""
        composed = compositor.compose("termination-letter", termination_data)
        lines = composed.text.split("\n")
        assert lines.count(DISTRIBUTION_BLANK_LINE) == 4

    def test_missing_distribution_gives_four_blank_lines(self, compositor, termination_data):
        composed = compositor.compose("termination-letter", termination_data)
        assert composed.text.split("\n").count(DISTRIBUTION_BLANK_LINE) == 4

    def test_distribution_line_items(self, compositor, termination_data):
        termination_data["distributionDetails"] = [
            {"amount": 5000, "recipient": "John Buyer"},
            {"amount": "1,000", "recipient": "Acme Realty"},
        ]
        composed = compositor.compose("termination-letter", termination_data)
        assert "$5,000.00 to John Buyer" in _flat(composed)
        assert "$1,000.00 to Acme Realty" in _flat(composed)
        assert DISTRIBUTION_BLANK_LINE not in _flat(composed)

    def test_distribution_free_text(self, compositor, termination_data):
        termination_data["distributionDetails"] = "Full deposit returned to buyer."
        composed = compositor.compose("termination-letter", termination_data)
        assert "Full deposit returned to buyer." in _flat(composed)
        assert DISTRIBUTION_BLANK_LINE not in _flat(composed)

    def test_parties_and_signature_dates(self, compositor, termination_data):
        termination_data["sellerDate"] = "2024-04-02"
        composed = compositor.compose("termination-letter", termination_data)
        assert "Name of Seller(s): Jane Seller" in _flat(composed)
        assert "Agreement on 2024-03-15 (date)." in _flat(composed)
        signatures = [b for b in _blocks(composed) if b.kind == BlockKind.SIGNATURE]
        assert [b.date for b in signatures] == ["2024-04-02", "2024-04-02", None, None]

    def test_non_string_signature_date(self, compositor, termination_data):
        termination_data["sellerDate"] = 20240402
        composed = compositor.compose("termination-letter", termination_data)
        signatures = [b for b in _blocks(composed) if b.kind == BlockKind.SIGNATURE]
        assert [b.date for b in signatures] == ["20240402", "20240402", None, None]


class TestCounterOffer:

    def test_acceptance_choice(self, compositor, counter_offer_data):
        composed = compositor.compose("counter-offer", counter_offer_data)
        assert "[X] Accepts the above counteroffer." in _flat(composed)
        assert "Rejects" not in _flat(composed)

    def test_no_choice_lists_all_options(self, compositor, counter_offer_data):
        del counter_offer_data["acceptanceType"]
        composed = compositor.compose("counter-offer", counter_offer_data)
        assert "_____ Accepts the above counteroffer." in _flat(composed)
        assert "_____ Rejects the above counter offer." in _flat(composed)

    def test_partial_acceptance_changes(self, compositor, counter_offer_data):
        counter_offer_data["acceptanceType"] = "Partially Accepts"
        counter_offer_data["additionalChanges"] = "Closing moved to July 1."
        composed = compositor.compose("counter-offer", counter_offer_data)
        assert "[X] Partially accepts" in _flat(composed)
        assert "Closing moved to July 1." in _flat(composed)

    def test_changes_ignored_unless_partial(self, compositor, counter_offer_data):
        counter_offer_data["additionalChanges"] = "Closing moved to July 1."
        composed = compositor.compose("counter-offer", counter_offer_data)
        assert "Closing moved to July 1." not in _flat(composed)

    def test_non_string_signature_date(self, compositor, counter_offer_data):
        counter_offer_data["buyerDate"] = 1
        composed = compositor.compose("counter-offer", counter_offer_data)
        signatures = [b for b in _blocks(composed) if b.kind == BlockKind.SIGNATURE]
        assert [b.date for b in signatures][2:] == ["1", "1"]

    def test_terms_and_expiration(self, compositor, counter_offer_data):
        counter_offer_data["expirationTime"] = "5:00"
        composed = compositor.compose("counter-offer", counter_offer_data)
        assert "Purchase price increased to $510,000." in _flat(composed)
        assert "before 5:00 am / pm on 2024-04-10 (date)" in _flat(composed)
