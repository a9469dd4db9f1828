from fastapi import status

from habitflow import models

CONTACT_URL = "/api/v1/contact/"


def _payload(**overrides):
    payload = {
        "name": "Test User",
        "email": "test@example.com",
        "subject": "Reminders",
        "category": "feature",
        "message": "Could reminders repeat on weekends?",
    }
    payload.update(overrides)
    return payload


def test_submit_contact_message(authorized_client, db):
    response = authorized_client.post(CONTACT_URL, json=_payload())
    assert response.status_code == status.HTTP_201_CREATED
    assert response.json()["category"] == "feature"
    assert db.query(models.ContactMessage).count() == 1


def test_contact_message_too_short(authorized_client, db):
    response = authorized_client.post(CONTACT_URL, json=_payload(message="Too short"))
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
    assert "message" in response.json()["details"]
    assert db.query(models.ContactMessage).count() == 0


def test_contact_message_invalid_email(authorized_client):
    response = authorized_client.post(CONTACT_URL, json=_payload(email="not-an-email"))
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
