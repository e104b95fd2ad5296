"""
Tests for the entity extractor.
"""
import pytest

from core.entities import extract_entities, find_amounts, find_vendor_mentions


class TestAmountExtraction:
    """Tests for monetary amount parsing."""

    @pytest.mark.parametrize("text,expected", [
        ("Total KES 1,250,000.50 payable", [1250000.50]),
        ("Unit price $1000 and 2500", [1000.0, 2500.0]),
        ("Ksh 3,000 plus £45.99", [3000.0, 45.99]),
        ("No figures here", []),
    ])
    def test_find_amounts(self, text, expected):
        assert find_amounts(text) == expected

    def test_amounts_keep_repetitions(self):
        assert find_amounts("KES 1,000 then KES 1,000 again") == [1000.0, 1000.0]

    def test_amount_entities_are_deduplicated(self):
        entities = extract_entities("KES 1,000 then KES 1,000 again, later 500")
        assert entities.amounts == ["KES 1,000", "500"]


class TestEntityExtraction:
    """Tests for dates, invoices and e-mails."""

    def test_extracts_all_entity_types(self):
        text = (
            "Invoice INV-001234 dated 12/05/2024 and inv0042 issued 3-6-24. "
            "Queries to accounts@county.go.ke or accounts@county.go.ke. "
            "Repeat: INV-001234."
        )
        entities = extract_entities(text)

        assert entities.invoice_numbers == ["INV-001234", "inv0042"]
        assert entities.dates == ["12/05/2024", "3-6-24"]
        assert entities.emails == ["accounts@county.go.ke"]
        assert entities.has_invoice_numbers
        assert entities.has_dates

    def test_invoice_requires_three_digits(self):
        assert extract_entities("Reference INV-12 only").invoice_numbers == []

    def test_deduplication_is_case_sensitive(self):
        entities = extract_entities("INV-100200 and inv-100200")
        assert entities.invoice_numbers == ["INV-100200", "inv-100200"]

    @pytest.mark.parametrize("text", ["", None])
    def test_empty_input_returns_empty_collections(self, text):
        entities = extract_entities(text)

        assert entities.amounts == []
        assert entities.dates == []
        assert entities.invoice_numbers == []
        assert entities.emails == []
        assert entities.vendor_mentions == {}
        assert not entities.has_dates

    def test_to_dict_is_serializable(self):
        import json

        data = extract_entities("Vendor: Acme Ltd billed KES 5,000 on 1/2/2024").to_dict()
        assert json.loads(json.dumps(data)) == data
        assert data["vendor_mentions"] == {"Acme Ltd": 1}


class TestVendorMentions:
    """Tests for vendor name extraction."""

    def test_keyword_is_case_insensitive(self):
        text = "VENDOR: Acme Ltd\nsupplier Beta Traders\nContractor: Gamma Builders Limited"
        assert find_vendor_mentions(text) == ["Acme Ltd", "Beta Traders", "Gamma Builders Limited"]

    def test_lowercase_names_are_ignored(self):
        assert find_vendor_mentions("the supplier shall deliver on time") == []

    def test_entity_vendor_counts(self, concentrated_vendors):
        entities = extract_entities(concentrated_vendors)
        assert entities.vendor_mentions == {"Acme Ltd": 6, "Beta Traders": 1}

    def test_mentions_on_one_line(self):
        text = "Vendor: Acme Ltd " * 6 + "Vendor: Beta Co"
        mentions = find_vendor_mentions(text)

        assert mentions == ["Acme Ltd"] * 6 + ["Beta Co"]

    def test_name_stops_at_company_suffix(self):
        text = "Goods from supplier Acme Ltd Approved By The Chief Officer"
        assert find_vendor_mentions(text) == ["Acme Ltd"]

    def test_name_never_absorbs_next_keyword(self):
        text = "Vendor: Beta Traders Supplier: Gamma Works"
        assert find_vendor_mentions(text) == ["Beta Traders", "Gamma Works"]


class TestAmountBoundaries:
    """Digit runs the amount pattern does not accept are rejected, never truncated."""

    @pytest.mark.parametrize("text", [
        "Account 1234567890123456 debited",
        "Rate 1234.567 applied",
        "Ratio 2.5 noted",
    ])
    def test_rejected(self, text):
        assert find_amounts(text) == []

    def test_fifteen_digits_accepted(self):
        assert find_amounts("Total 999999999999999 due") == [999999999999999.0]

    def test_sentence_final_period(self):
        assert find_amounts("The total was KES 1,000.") == [1000.0]
