"""Unit tests for stored document layouts"""

from datetime import datetime, timezone
from cresus_dossier.domain.documents import (
    charges_section,
    credits_section,
    document_from_record,
    record_from_document,
)
from cresus_dossier.domain.models import Attachment, DossierRecord


def test_nested_layout_is_read():
    document = {
        "charges": {"housing": {"rent": 50000}, "children": {"schooling": 3000}},
        "credits": {"consumer": [{"creditor": "Cetelem", "monthly_payment": 12000}]},
    }

    assert charges_section(document, "housing") == {"rent": 50000}
    assert charges_section(document, "other") == {}
    assert credits_section(document, "consumer") == [{"creditor": "Cetelem", "monthly_payment": 12000}]
    assert credits_section(document, "mortgage") == []


def test_flat_layout_is_read():
    document = {
        "charges_housing": {"rent": 42000},
        "credits_mortgage": [{"creditor": "LCL", "monthly_payment": 70000}],
        "other_debts": [{"creditor": "Trésor public", "arrears": 90000}],
    }

    assert charges_section(document, "housing") == {"rent": 42000}
    assert credits_section(document, "mortgage")[0]["creditor"] == "LCL"
    assert credits_section(document, "other_debts")[0]["arrears"] == 90000


def test_flat_key_wins_over_nested():
    """Test precedence when a document carries both layouts"""
    document = {
        "charges": {"housing": {"rent": 1}},
        "charges_housing": {"rent": 2},
        "credits": {"consumer": [{"creditor": "nested"}]},
        "credits_consumer": [{"creditor": "flat"}],
    }

    assert charges_section(document, "housing") == {"rent": 2}
    assert credits_section(document, "consumer") == [{"creditor": "flat"}]


def test_record_from_legacy_document():
    """Test euro text amounts and a flat layout are normalized to cents"""
    document = {
        "created_at": "2025-03-05T10:15:00+00:00",
        "contact": {"last_name": "Durand", "first_name": "Paul", "unknown_field": "ignored"},
        "consents": {"data_processing": True},
        "income": {"salaries": "1 500,50"},
        "charges_housing": {"rent": "600"},
        "credits_consumer": [{"creditor": "Oney", "monthly_payment": "85,10", "remaining_principal": 120000}],
        "files": [{"name": "avis.pdf", "url": "https://storage/avis.pdf", "path": "dossiers/1_0_avis.pdf"}],
    }

    record = record_from_document(document)

    assert record.contact.last_name == "Durand"
    assert record.contact.civility == "Monsieur"
    assert record.consents.data_processing is True
    assert record.income == {"salaries": 150050}
    assert record.housing == {"rent": 60000}
    assert record.consumer[0].monthly_payment == 8510
    assert record.consumer[0].remaining_principal == 120000
    assert record.files == [Attachment("avis.pdf", "https://storage/avis.pdf", "dossiers/1_0_avis.pdf")]
    assert record.created_at == datetime(2025, 3, 5, 10, 15, tzinfo=timezone.utc)


def test_null_fields_fall_back_to_defaults():
    """Test null contact, consent and attachment fields read as empty values"""
    document = {
        "contact": {"last_name": None, "first_name": "Claire", "civility": None},
        "consents": {"data_processing": None},
        "files": [{"name": "avis.pdf", "url": None, "path": None}],
    }

    record = record_from_document(document)

    assert record.contact.last_name == ""
    assert record.contact.first_name == "Claire"
    assert record.contact.civility == "Monsieur"
    assert record.consents.data_processing is False
    assert record.files == [Attachment("avis.pdf", "", "")]


def test_invalid_timestamp_is_ignored():
    assert record_from_document({"created_at": "hier"}).created_at is None


def test_document_is_written_nested_with_totals(sample_record: DossierRecord):
    created_at = datetime(2025, 3, 5, 10, 15, tzinfo=timezone.utc)

    document = document_from_record(sample_record, created_at=created_at)

    assert document["created_at"] == "2025-03-05T10:15:00+00:00"
    assert document["charges"]["housing"] == {"rent": 65000, "energy": 8000}
    assert document["credits"]["consumer"][0]["creditor"] == "Cofidis"
    assert "charges_housing" not in document
    assert document["totals"] == {
        "total_income_cents": 205000,
        "total_expenses_cents": 90000,
        "total_credits_cents": 15000,
        "residual_cents": 100000,
    }


def test_document_survives_reload(sample_record: DossierRecord):
    """Test a written document reads back to the same record"""
    reloaded = record_from_document(document_from_record(sample_record))

    assert reloaded.contact == sample_record.contact
    assert reloaded.housing == sample_record.housing
    assert reloaded.consumer == sample_record.consumer
    assert reloaded.other_debts == sample_record.other_debts


def test_empty_document():
    record = record_from_document({})
    assert record == DossierRecord()
