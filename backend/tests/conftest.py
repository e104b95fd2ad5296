"""
Pytest configuration and fixtures for Kanuni tests.
"""
import sys
from pathlib import Path
from typing import Generator

import pytest
from fastapi.testclient import TestClient

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent.parent))


COMPLIANT_TENDER = (
    "TENDER DOCUMENT FOR SUPPLY OF OFFICE EQUIPMENT. "
    "This procurement is included in the approved annual procurement plan and the "
    "budget for the financial year. A tender security of 2% of the tender sum is required. "
    "Bids shall be submitted within 30 days. Tender opening shall take place immediately "
    "after the deadline and bidders may attend in public. The evaluation committee shall "
    "apply the published evaluation criteria. The award shall be made to the bidder with "
    "the lowest evaluated price. The successful bidder shall sign a written contract and "
    "provide a performance security of 10% of the contract value."
)


@pytest.fixture
def compliant_tender() -> str:
    """A procurement document that satisfies every rule."""
    return COMPLIANT_TENDER


@pytest.fixture
def definitional_tender() -> str:
    """Compliant document with an anti-corruption policy clause."""
    return COMPLIANT_TENDER + " This policy prohibits bribery and kickbacks."


@pytest.fixture
def evidentiary_tender(definitional_tender) -> str:
    """Policy clause plus evidence of an actual kickback."""
    return (
        definitional_tender
        + " An investigation found evidence of a kickback paid to the committee."
    )


@pytest.fixture
def non_compliant_tender() -> str:
    """A procurement document that fails more rules than the violation cap."""
    return (
        "Procurement of road maintenance works for the county. "
        "The procurement was split into three lots below the approval threshold. "
        "A public officer is a director of the winning firm. "
        "A tender security of 5% of the tender value was demanded from each bidder. "
        "The winning firm paid a bribe to secure the job. "
        "Evaluation was done by the committee without a written report."
    )


@pytest.fixture
def concentrated_vendors() -> str:
    """Six mentions of one vendor and one of another."""
    return "\n".join(["Vendor: Acme Ltd"] * 6 + ["Supplier: Beta Traders"])


@pytest.fixture
def round_priced_quote() -> str:
    """Quotation with three round-thousand amounts out of four."""
    return (
        "The quotation lists KES 1,000 for chairs, KES 2,000 for desks, "
        "KES 3,000 for cabinets and KES 1,234 for delivery."
    )


@pytest.fixture
def test_client() -> Generator[TestClient, None, None]:
    """Create a test client for the FastAPI app."""
    from main import app

    with TestClient(app) as client:
        yield client
