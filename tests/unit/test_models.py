"""Unit tests for Pydantic data models."""

import pytest
from datetime import date
from pydantic import ValidationError

from civicrag.models import (
    BillRecord,
    BillStatus,
    DocumentRecord,
    DocumentType,
    IngestRequest,
    Representative,
    ScrapedRepresentative,
    create_embedding_metadata,
    create_profile_content,
)


class TestIngestRequest:
    """Tests for IngestRequest model."""

    def test_valid_request(self):
        request = IngestRequest(
            title="  Finance Bill 2024 ",
            document_type="bill",
            original_file_name="finance-bill-2024.pdf",
            bill_number="7",
            passage_date="2024-06-28",
        )

        assert request.title == "Finance Bill 2024"
        assert request.document_type == DocumentType.BILL
        assert request.status == BillStatus.PASSED
        assert request.passage_date == date(2024, 6, 28)

    def test_blank_title(self):
        with pytest.raises(ValidationError):
            IngestRequest(title="   ", document_type="bill", original_file_name="a.pdf")

    def test_unknown_document_type(self):
        with pytest.raises(ValidationError):
            IngestRequest(title="Memo", document_type="memo", original_file_name="a.pdf")

    def test_requires_summary(self):
        assert DocumentType.BILL.requires_summary
        assert DocumentType.PARLIAMENTARY_BULLETIN.requires_summary
        assert not DocumentType.CONSTITUTION.requires_summary
        assert not DocumentType.ELECTION_LAW.requires_summary


class TestRecords:
    """Tests for stored record models."""

    def test_document_ids_are_unique(self):
        first = DocumentRecord(title="A", type="constitution", content="x", original_file_name="a.pdf")
        second = DocumentRecord(title="A", type="constitution", content="x", original_file_name="a.pdf")

        assert first.id != second.id
        assert first.created_at.tzinfo is not None

    def test_bill_status(self):
        with pytest.raises(ValidationError):
            BillRecord(title="Bill", summary="s", original_text="t", status="vetoed")


class TestRepresentativeProfile:
    """Tests for the embedded profile text."""

    def test_full_profile(self, make_representative):
        rep = make_representative(oath_taking_date=date(2024, 2, 29), islamabad_address="Parliament Lodges")

        content = create_profile_content(rep)

        assert content.splitlines() == [
            "Representative: Mr. Ali Khan",
            "Father: Ahmed Khan",
            "Constituency: NA-1 (Chitral)",
            "Area: Chitral",
            "District: Chitral",
            "Province: Khyber Pakhtunkhwa",
            "Party: IND",
            "Oath Date: 2024-02-29",
            "Phone: 0300-0000000",
            "Islamabad Address: Parliament Lodges",
        ]

    def test_optional_lines_omitted(self):
        rep = Representative(
            name="Ms. Sara", name_clean="Sara", constituency="NA-2", constituency_code="NA-2", party="PPP"
        )

        assert create_profile_content(rep) == (
            "Representative: Ms. Sara\nConstituency: NA-2\nParty: PPP"
        )
        assert create_embedding_metadata(rep) == {
            "province": None, "party": "PPP", "constituency": "NA-2", "district": None,
        }


class TestScrapedRepresentative:
    """Tests for the scraped member list format."""

    def test_camel_case_record(self):
        scraped = ScrapedRepresentative.model_validate({
            "constituency": "NA-1 (Chitral)",
            "constituencyCode": "NA-1",
            "constituencyName": "Chitral",
            "name": "Mr. Ali Khan",
            "nameClean": "Ali Khan",
            "fatherName": "Ahmed Khan",
            "party": "IND",
            "phone": "  ",
            "oathTakingDate": "29-02-2024",
            "imageUrl": "https://na.gov.pk/uploads/images/1.jpg",
        })

        rep = scraped.to_representative()

        assert rep.constituency_code == "NA-1"
        assert rep.father_name == "Ahmed Khan"
        assert rep.phone is None
        assert rep.oath_taking_date == date(2024, 2, 29)
        assert rep.id

    def test_invalid_oath_date_dropped(self):
        scraped = ScrapedRepresentative.model_validate({
            "constituency": "NA-2", "constituencyCode": "NA-2", "name": "Ms. Sara",
            "nameClean": "Sara", "party": "PPP", "oathTakingDate": "2024/02/29",
        })

        assert scraped.oath_taking_date is None
