import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from vcard_export.main import app


@pytest_asyncio.fixture
async def test_client():
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def contact_payload() -> dict:
    return {
        "name": {"first": "Alice", "last": "Smith"},
        "emails": [{"address": "alice@example.com", "type": "WORK", "preferred": True}],
        "phones": [{"number": "+15551234567", "type": "MOBILE"}],
        "addresses": [{
            "street": "1 Main St",
            "city": "Springfield",
            "state": "IL",
            "postal_code": "62701",
            "country": "USA",
            "type": "HOME",
        }],
        "organization": {"name": "Acme", "department": "R&D", "title": "Engineer"},
        "urls": [{"address": "https://alice.example.com"}],
        "note": "Met at a conference",
        "birthday": "1990-05-15",
        "anniversary": "2015-06-20",
        "custom_properties": {"X-TWITTER": "@alice", "NICKNAME": "ignored"},
        "version": "4.0",
    }
