"""Document compositor: lays out a template's data as a paginated PDF

Each supported template has a routine that writes its fixed legal structure
through the shared layout primitives. Composition is a pure function of the
template, the data record and the page geometry.
"""

import logging
from datetime import date
from typing import Any, Callable, Optional

from pydantic import BaseModel

from legal_forms.errors import UnsupportedTemplateError
from legal_forms.models.document import document_file_name
from legal_forms.models.template import DocumentTemplate
from legal_forms.services.layout import (
    BLANK,
    SHORT_BLANK,
    Page,
    PageGeometry,
    PageLayout,
    display_value,
    format_currency,
)
from legal_forms.services.pdf_renderer import PDFRenderer
from legal_forms.services.registry import TemplateRegistry
from legal_forms.utils.config import Settings, get_settings
from legal_forms.utils.pdf_fonts import resolve_fonts

logger = logging.getLogger(__name__)

LEGAL_NOTICE = (
    "THIS IS A LEGALLY BINDING CONTRACT. IF NOT FULLY UNDERSTOOD, WE RECOMMEND ALL "
    "PARTIES TO THE CONTRACT CONSULT AN ATTORNEY BEFORE SIGNING."
)
LONG_BLANK = "_______________________________________________"
DISTRIBUTION_BLANK_LINE = "$ ___________________ to _______________________________________________"
DISTRIBUTION_BLANK_COUNT = 4

INSPECTION_CLAUSES = [
    ("structuralInspection",
     "[X] STRUCTURAL INSPECTION: A determination by a New York State licensed home inspector "
     "that the premises are free from any substantial structural defects."),
    ("pestInspection",
     "[X] WOOD DESTROYING ORGANISMS (PEST, TERMITE INSPECTION): A determination by a Certified "
     "Exterminator that the premises are free from infestation or damage by wood destroying organisms."),
    ("septicInspection",
     "[X] SEPTIC SYSTEM INSPECTION: A test of the septic system indicating that the system is in working order."),
    ("wellWaterTest",
     "[X] WELL WATER FLOW AND/OR QUALITY TESTS: Water quality and flow tests to meet required standards."),
    ("radonInspection",
     "[X] RADON INSPECTION: Testing for radon gas presence."),
]

ACCEPTANCE_TEXT = {
    "accepts": "[X] Accepts the above counteroffer.",
    "rejects": "[X] Rejects the above counter offer.",
    "partially-accepts": "[X] Partially accepts the above counter offer, subject to the following change(s).",
}
ACCEPTANCE_BLANK = (
    "_____ Accepts the above counteroffer.\n"
    "_____ Rejects the above counter offer.\n"
    "_____ Partially accepts the above counter offer, subject to the following change(s)."
)


class ComposedDocument(BaseModel):
    """Result of composition: PDF bytes plus pagination metadata"""
    template_id: str
    file_name: str
    buffer: bytes
    pages: list[Page]

    @property
    def page_count(self) -> int:
        return len(self.pages)

    @property
    def text(self) -> str:
        """All laid-out text in block order"""
        parts = []
        for page in self.pages:
            for block in page.blocks:
                parts.append(block.text)
                if block.date:
                    parts.append(block.date)
        return "\n".join(parts)


def _number(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(str(value).replace(",", "").lstrip("$"))
    except ValueError:
        return None


def _text(data: dict, key: str, placeholder: str = SHORT_BLANK) -> str:
    return display_value(data.get(key), placeholder)


def _flag(data: dict, key: str) -> bool:
    return data.get(key) is True


class DocumentCompositor:
    """Compose template data into a laid-out, rendered document"""

    def __init__(self, registry: TemplateRegistry, settings: Optional[Settings] = None):
        settings = settings or get_settings()
        self.registry = registry
        self.geometry: PageGeometry = settings.page_geometry()
        self.font_name, self.font_bold = resolve_fonts(settings)
        self._routines: dict[str, Callable[[PageLayout, dict], None]] = {
            "purchase-agreement": self._purchase_agreement,
            "termination-letter": self._termination_letter,
            "counter-offer": self._counter_offer,
        }

    def supports(self, template_id: str) -> bool:
        return template_id in self._routines

    def layout(self, template: DocumentTemplate, data: dict) -> list[Page]:
        """Lay out the document without rendering it"""
        routine = self._routines.get(template.id)
        if routine is None:
            raise UnsupportedTemplateError(template.id)
        page_layout = PageLayout(self.geometry, self.font_name, self.font_bold)
        routine(page_layout, data)
        return page_layout.pages

    def compose(self, template_id: str, data: dict, file_name: Optional[str] = None,
                generated_on: Optional[date] = None) -> ComposedDocument:
        """Compose a document.

        Raises TemplateNotFoundError for an unknown id and
        UnsupportedTemplateError for a template without a routine.
        """
        template = self.registry.require(template_id)
        pages = self.layout(template, dict(data))

        renderer = PDFRenderer(self.font_name, self.font_bold, self.geometry.line_height)
        buffer = renderer.render(pages, title=template.name)
        file_name = file_name or document_file_name(template.name, generated_on)
        logger.info(f"Composed {template_id}: {len(pages)} page(s), {len(buffer)} bytes")

        return ComposedDocument(
            template_id=template_id,
            file_name=file_name,
            buffer=buffer,
            pages=pages,
        )

    def _purchase_agreement(self, doc: PageLayout, data: dict) -> None:
        doc.add_title("STANDARD FORM CONTRACT FOR PURCHASE AND SALE OF REAL ESTATE")
        doc.add_text(LEGAL_NOTICE, font_size=9, bold=True)
        doc.skip(5)

        doc.add_section("1. IDENTIFICATION OF PARTIES TO THE CONTRACT")
        doc.add_field("A. SELLER - The seller is", _text(data, "sellerName", BLANK), inline=True)
        doc.add_field("B. Residing at", _text(data, "sellerAddress", BLANK))
        doc.add_text('(The word "Seller" refers to each and all parties who have an ownership '
                     'interest in the property.)', font_size=9)
        doc.add_field("C. PURCHASER - The purchaser is", _text(data, "buyerName", BLANK), inline=True)
        doc.add_field("D. Residing at", _text(data, "buyerAddress", BLANK))
        doc.add_text('(The word "Purchaser" refers to each and all of those who signed below as '
                     'Purchaser.)', font_size=9)

        doc.add_section("2. PROPERTY TO BE SOLD")
        doc.add_text(
            "The property and improvements which the Seller is agreeing to sell and which the "
            f"Purchaser is agreeing to purchase is known as {_text(data, 'propertyAddress')}, "
            f"located in the city, village or town of {_text(data, 'city')} in "
            f"{_text(data, 'county')} County, in the State of {_text(data, 'state', 'New York')}. "
            "This property includes all the Seller's rights and privileges, if any, to all land, "
            "water, streets and roads annexed to, and on all sides of the property.")
        doc.add_field("The lot size of the property is approximately", _text(data, "lotSize", BLANK))

        doc.add_section("3. ITEMS INCLUDED IN SALE")
        doc.add_text(_text(data, "itemsIncluded", "No specific items listed."))
        doc.add_text('The items listed above if now in or on said premises, and owned by the Seller '
                     'free from all liens and encumbrances, are included in the sale "as is", on '
                     'the date of this offer.')

        doc.add_section("4. ITEMS EXCLUDED FROM SALE")
        doc.add_text("The following items are excluded from the sale: "
                     f"{_text(data, 'itemsExcluded', 'None specified')}.")

        price = format_currency(data.get("purchasePrice"))
        doc.add_section("5. PURCHASE PRICE")
        doc.add_text(f"The purchase price is {price} DOLLARS ({price}). "
                     "The Purchaser shall pay the purchase price as follows:")
        doc.add_field("A. Deposit with this contract and held pursuant to paragraph 16 herein",
                      format_currency(data.get("depositAmount")))
        doc.add_field("B. Additional deposit on",
                      f"{format_currency(data.get('additionalDeposit'))} on "
                      f"{_text(data, 'additionalDepositDate')}")
        doc.add_field("C. In cash, certified check, bank draft or attorney escrow account check at closing",
                      format_currency(data.get("cashAtClosing")))
        doc.add_field("D. (Other)", _text(data, "otherPayment", "None specified"))

        doc.add_section("6. MORTGAGE CONTINGENCY")
        mortgage_amount = _number(data.get("mortgageAmount"))
        if mortgage_amount and mortgage_amount > 0:
            doc.add_text(
                "A. This agreement is contingent upon Purchaser obtaining approval of a "
                f"{_text(data, 'mortgageType', 'Conventional')} mortgage loan of "
                f"{format_currency(mortgage_amount)} for a term of no more than "
                f"{_text(data, 'mortgageTerm', '_____')} years at an initial fixed or adjustable "
                "nominal interest rate not to exceed "
                f"{_text(data, 'interestRate', '_____')}% (percent). Purchaser agrees to use "
                "diligent efforts to obtain said approval and shall apply for the mortgage loan "
                f"within {_text(data, 'businessDaysToApply', '_____')} business days after the "
                "Seller has accepted this contract.")
            if data.get("mortgageContingencyDate"):
                doc.add_text(
                    "In the event notice as called for in the preceding sentence has not been "
                    f"received on or before {data['mortgageContingencyDate']}, then either "
                    "Purchaser or Seller may within five business days of such date terminate, "
                    "or the parties may mutually agree to extend, this contract by written notice.")
            contribution = _number(data.get("sellerContribution"))
            if contribution and contribution > 0:
                doc.add_field("B. Seller's Contribution: At closing, as a credit toward prepaids, "
                              "closing costs and/or points, Seller shall credit to Purchaser",
                              format_currency(contribution))
        else:
            doc.add_text("No mortgage contingency specified.")

        doc.add_section("15. TRANSFER OF TITLE/POSSESSION")
        doc.add_text(
            "The transfer of title to the property from Seller to Purchaser will take place at "
            "the office of the lender's attorney if the Purchaser obtains a mortgage loan from a "
            "lending institution. Otherwise, the closing will be at the office of the attorney "
            f"for the Seller. The closing will be on or before {_text(data, 'closingDate')}. "
            "Possession shall be granted upon transfer of title unless otherwise mutually agreed "
            "upon in writing signed by both parties.")

        selected = [clause for key, clause in INSPECTION_CLAUSES if _flag(data, key)]
        if selected:
            doc.add_section("21. INSPECTIONS")
            doc.add_text("This agreement is contingent upon all of the following provisions "
                         "marked with the parties' initials:")
            for clause in selected:
                doc.add_text(clause)
            if data.get("inspectionDate"):
                doc.add_text("All tests and/or inspections contemplated pursuant to this paragraph "
                             f"\"21\" shall be completed on or before {data['inspectionDate']}.")

        doc.skip(10)
        doc.add_section("SIGNATURES")
        for label in ("Purchaser", "Purchaser", "Seller", "Seller"):
            doc.add_signature_line(label)

    def _termination_letter(self, doc: PageLayout, data: dict) -> None:
        doc.add_title("Letter of Termination of Purchase and Sale")
        doc.skip(10)

        doc.add_field("Name of Seller(s)", _text(data, "sellerName", BLANK), inline=True)
        doc.skip(5)
        doc.add_field("Name of Buyer(s)", _text(data, "buyerName", BLANK), inline=True)
        doc.skip(5)
        doc.add_field("Property Address", _text(data, "propertyAddress", BLANK), inline=True)
        doc.skip(10)

        doc.add_text("The Seller(s) and Buyer(s) listed above entered into a Purchase and Sale "
                     f"Agreement on {_text(data, 'contractDate')} (date).")
        doc.skip(5)
        doc.add_text("The Buyer(s) hereby unconditionally waives and releases any claim against "
                     "the Seller(s) arising under the Purchase and Sale Agreement or by reason of "
                     "its termination.")
        doc.skip(5)
        doc.add_text("The Seller(s) hereby unconditionally waives and releases any claim against "
                     "the Buyer(s) arising under the Purchase and Sale Agreement or by reason of "
                     "its termination.")
        doc.skip(5)
        doc.add_text("The Seller(s) and Buyer(s) hereby agree that any deposit, earnest money or "
                     "other monies held by any real estate broker or attorney with regard to the "
                     "purchase and sale of the above-referenced property shall be distributed in "
                     "the following amounts to the following persons:")
        doc.skip(5)

        for line in self._distribution_lines(data.get("distributionDetails")):
            doc.add_text(line)

        doc.skip(10)
        doc.add_text("I/We understand agree to the above explanations and all terms.")
        doc.skip(15)

        seller_date = _text(data, "sellerDate", "") or None
        buyer_date = _text(data, "buyerDate", "") or None
        doc.add_signature_line("Seller (print)", seller_date)
        doc.add_signature_line("Seller (print)", seller_date)
        doc.add_signature_line("Buyer (print)", buyer_date)
        doc.add_signature_line("Buyer (print)", buyer_date)

    @staticmethod
    def _distribution_lines(details: Any) -> list[str]:
        """Distribution of funds as line items, free text, or fixed blank lines"""
        if isinstance(details, list) and details:
            lines = []
            for item in details:
                if isinstance(item, dict):
                    recipient = display_value(item.get("recipient"), LONG_BLANK)
                    lines.append(f"{format_currency(item.get('amount'))} to {recipient}")
                else:
                    lines.append(str(item))
            return lines
        if isinstance(details, str) and details.strip():
            return [details]
        return [DISTRIBUTION_BLANK_LINE] * DISTRIBUTION_BLANK_COUNT

    def _counter_offer(self, doc: PageLayout, data: dict) -> None:
        doc.add_title("Counteroffer to Purchase")
        doc.add_text(LEGAL_NOTICE, font_size=9, bold=True)
        doc.skip(10)

        doc.add_text(
            "The following counter offer is in response to the Offer to Purchase dated "
            f"{_text(data, 'originalOfferDate')}, for the property located at "
            f"{_text(data, 'propertyAddress', LONG_BLANK)}, between the seller(s) "
            f"{_text(data, 'sellerName', LONG_BLANK)} and the buyer(s) "
            f"{_text(data, 'buyerName', LONG_BLANK)}.")
        doc.skip(10)

        doc.add_text("The following counteroffer is as follows:")
        doc.skip(5)
        doc.add_text(_text(data, "counterOfferTerms", "_" * 200))
        doc.skip(10)

        doc.add_text("All other items of the original offer remain the same.")
        doc.skip(10)

        doc.add_section("EXPIRATION")
        doc.add_text(
            "If this counter offer is not signed and delivered to the buyer and seller before "
            f"{_text(data, 'expirationTime', '_______')} am / pm on "
            f"{_text(data, 'expirationDate')} (date), this counter offer will terminate.")
        doc.skip(5)
        doc.add_text("All parties understand, the seller(s) has the right to accept any other "
                     "offers prior to the acceptance and delivery of this counter offer.")
        doc.skip(10)

        doc.add_section("The Undersigned Buyer(s)")
        acceptance = data.get("acceptanceType")
        response = str(acceptance).strip().lower().replace(" ", "-") if acceptance else ""
        doc.add_text(ACCEPTANCE_TEXT.get(response, ACCEPTANCE_BLANK))

        if response == "partially-accepts" and data.get("additionalChanges"):
            doc.skip(5)
            doc.add_text(str(data["additionalChanges"]))

        doc.skip(15)
        seller_date = _text(data, "sellerDate", "") or None
        buyer_date = _text(data, "buyerDate", "") or None
        doc.add_signature_line("Seller", seller_date)
        doc.add_signature_line("Seller", seller_date)
        doc.add_signature_line("Buyer", buyer_date)
        doc.add_signature_line("Buyer", buyer_date)
