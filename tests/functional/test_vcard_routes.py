from urllib.parse import unquote

import pytest
from httpx import AsyncClient
from fastapi import status


@pytest.mark.asyncio
async def test_download_vcard(test_client: AsyncClient, contact_payload: dict):
    response = await test_client.post("/vcard/", json=contact_payload)
    assert response.status_code == status.HTTP_200_OK
    assert response.headers["content-type"] == "text/vcard; charset=utf-8"
    assert response.headers["content-disposition"] == 'attachment; filename="alice-smith.vcf"'

    lines = response.text.split("\n")
    assert lines[0] == "BEGIN:VCARD"
    assert lines[1] == "VERSION:4.0"
    assert "N:Smith;Alice;;;" in lines
    assert "FN:Alice Smith" in lines
    assert "EMAIL;TYPE=WORK;PREF=1:alice@example.com" in lines
    assert "TEL;TYPE=MOBILE:+15551234567" in lines
    assert "ADR;TYPE=HOME:;;1 Main St;Springfield;IL;62701;USA" in lines
    assert "ORG:Acme;R&D" in lines
    assert "TITLE:Engineer" in lines
    assert "URL:https://alice.example.com" in lines
    assert "NOTE:Met at a conference" in lines
    assert "BDAY:1990-05-15" in lines
    assert "ANNIVERSARY:2015-06-20" in lines
    assert "X-TWITTER:@alice" in lines
    assert "NICKNAME" not in response.text
    assert lines[-2] == "END:VCARD"


@pytest.mark.asyncio
async def test_download_vcard_3_drops_anniversary(test_client: AsyncClient, contact_payload: dict):
    contact_payload["version"] = "3.0"
    response = await test_client.post("/vcard/", json=contact_payload)
    assert response.status_code == status.HTTP_200_OK
    assert "VERSION:3.0\n" in response.text
    assert "ANNIVERSARY" not in response.text


@pytest.mark.asyncio
async def test_download_invalid_vcard(test_client: AsyncClient):
    response = await test_client.post("/vcard/", json={"emails": [{"address": "a@example.com"}]})
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["detail"].startswith("Invalid vCard:")


@pytest.mark.asyncio
async def test_download_empty_phone(test_client: AsyncClient):
    response = await test_client.post("/vcard/", json={
        "name": {"first": "Alice"},
        "phones": [{"number": ""}],
    })
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert "phone" in response.json()["detail"]


@pytest.mark.asyncio
async def test_download_malformed_date(test_client: AsyncClient):
    response = await test_client.post("/vcard/", json={
        "name": {"first": "Alice"},
        "birthday": "15/05/1990",
    })
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_download_from_form(test_client: AsyncClient):
    response = await test_client.post("/vcard/form", json={
        "first_name": "John",
        "last_name": "Doe",
        "email": "john@example.com",
        "email_type": "home",
        "phone": "+1234567890",
        "phone_type": "mobile",
        "organization": "Acme",
        "title": "Engineer",
    })
    assert response.status_code == status.HTTP_200_OK
    assert response.headers["content-disposition"] == 'attachment; filename="john-doe.vcf"'
    assert "EMAIL;TYPE=HOME:john@example.com\n" in response.text
    assert "TEL;TYPE=MOBILE:+1234567890\n" in response.text
    assert "ORG:Acme\n" in response.text
    assert "TITLE:Engineer\n" in response.text


@pytest.mark.asyncio
async def test_download_from_form_without_name(test_client: AsyncClient):
    response = await test_client.post("/vcard/form", json={"email": "john@example.com"})
    assert response.status_code == status.HTTP_400_BAD_REQUEST


@pytest.mark.asyncio
async def test_vcard_json(test_client: AsyncClient, contact_payload: dict):
    response = await test_client.post("/vcard/json", json=contact_payload)
    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert body["vcard"].startswith("BEGIN:VCARD\nVERSION:4.0\n")
    assert body["vcard"].endswith("END:VCARD\n")
    data = body["data"]
    assert data["name"]["first"] == "Alice"
    assert data["emails"] == [{"address": "alice@example.com", "type": "WORK", "preferred": True}]
    assert data["organization"]["department"] == "R&D"
    assert data["birthday"] == "1990-05-15"
    assert data["anniversary"] == "2015-06-20"
    assert data["custom_properties"] == {"X-TWITTER": "@alice", "NICKNAME": "ignored"}


@pytest.mark.asyncio
async def test_vcard_json_invalid(test_client: AsyncClient):
    response = await test_client.post("/vcard/json", json={})
    assert response.status_code == status.HTTP_400_BAD_REQUEST


@pytest.mark.asyncio
async def test_download_vcard_with_non_ascii_name(test_client: AsyncClient):
    response = await test_client.post("/vcard/", json={"name": {"first": "太郎", "last": "山田"}})
    assert response.status_code == status.HTTP_200_OK
    disposition = response.headers["content-disposition"]
    assert disposition.startswith('attachment; filename="__-__.vcf"; filename*=UTF-8\'\'')
    assert unquote(disposition.split("''", 1)[1]) == "太郎-山田.vcf"
    assert "FN:太郎 山田\n" in response.text


@pytest.mark.asyncio
async def test_download_from_form_with_quoted_name(test_client: AsyncClient):
    response = await test_client.post("/vcard/form", json={"first_name": '"JJ"', "last_name": "Doe"})
    assert response.status_code == status.HTTP_200_OK
    assert response.headers["content-disposition"] == (
        'attachment; filename="_jj_-doe.vcf"; filename*=UTF-8\'\'%22jj%22-doe.vcf'
    )
