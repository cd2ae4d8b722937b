from datetime import datetime, timezone
from pathlib import Path

import pytest

from fraudlr.core.exceptions import ValidationError
from fraudlr.models import Case, CaseStatus, Subscription
from fraudlr.services.cases import advance_case_status, is_csv_upload
from fraudlr.services.usage import change_subscription_tier, check_and_reset_usage, record_upload
from conftest import make_settings, signup

CSV_BODY = b"transaction_id,amount,merchant\n1,19.99,acme\n2,250.00,globex\n"


def upload(client, name="March transactions", content=CSV_BODY, filename="tx.csv", content_type="text/csv", **data):
    return client.post(
        "/api/cases",
        data={"name": name, **data},
        files={"file": (filename, content, content_type)},
    )


def current_subscription(client):
    return client.get("/auth/me").json()["user"]["subscription"]


# ---------------------------------------------------------------------------
# Upload
# ---------------------------------------------------------------------------

@pytest.mark.integration
def test_upload_creates_pending_case(signed_up_client, settings):
    response = upload(signed_up_client, description="  weekly export  ")

    assert response.status_code == 201
    case = response.json()["case"]
    assert case["status"] == "PENDING"
    assert case["name"] == "March transactions"
    assert case["description"] == "weekly export"
    assert case["results"] is None
    assert case["fileUrl"].startswith("/uploads/cases/")

    stored = Path(settings.UPLOADS_DIR) / "cases" / case["fileUrl"].rsplit("/", 1)[1]
    assert stored.read_bytes() == CSV_BODY
    assert current_subscription(signed_up_client)["csvUploadsThisMonth"] == 1


@pytest.mark.integration
def test_free_plan_upload_limit(signed_up_client, db):
    assert upload(signed_up_client).status_code == 201
    assert upload(signed_up_client).status_code == 201

    response = upload(signed_up_client)
    assert response.status_code == 403
    assert response.json()["code"] == "plan_limit_exceeded"
    assert db.query(Case).count() == 2
    assert current_subscription(signed_up_client)["csvUploadsThisMonth"] == 2


@pytest.mark.integration
def test_upgrade_lifts_upload_limit(signed_up_client, db):
    account_id = signed_up_client.get("/auth/me").json()["user"]["id"]
    upload(signed_up_client)
    upload(signed_up_client)

    change_subscription_tier(db, account_id, "standard")
    assert upload(signed_up_client).status_code == 201
    assert current_subscription(signed_up_client) == {
        "tier": "STANDARD", "csvUploadsThisMonth": 3, "isActive": True,
    }


@pytest.mark.integration
def test_usage_resets_in_new_month(signed_up_client, db):
    upload(signed_up_client)
    upload(signed_up_client)
    assert upload(signed_up_client).status_code == 403

    subscription = db.query(Subscription).one()
    subscription.usage_period_start = datetime(2000, 1, 1, tzinfo=timezone.utc)
    db.commit()

    assert current_subscription(signed_up_client)["csvUploadsThisMonth"] == 0
    assert upload(signed_up_client).status_code == 201


@pytest.mark.integration
def test_inactive_subscription_cannot_upload(signed_up_client, db):
    subscription = db.query(Subscription).one()
    subscription.is_active = False
    db.commit()

    assert upload(signed_up_client).status_code == 403


@pytest.mark.integration
def test_uploads_counted_from_stale_reads(app, signed_up_client, db):
    first = app.state.session_factory()
    second = app.state.session_factory()
    try:
        # Both sessions read the counter before either writes
        stale_a = first.query(Subscription).one()
        stale_b = second.query(Subscription).one()
        assert stale_a.csv_uploads_this_month == stale_b.csv_uploads_this_month == 0

        record_upload(first, stale_a)
        first.commit()
        record_upload(second, stale_b)
        second.commit()
    finally:
        first.close()
        second.close()

    db.expire_all()
    assert db.query(Subscription).one().csv_uploads_this_month == 2


@pytest.mark.integration
@pytest.mark.parametrize(
    "kwargs, message",
    [
        ({"name": "   "}, "Please provide a case name"),
        ({"content": b""}, "Please upload a file"),
        ({"filename": "tx.xlsx", "content_type": "application/octet-stream"}, "Please upload a CSV file"),
    ],
)
def test_upload_rejected(signed_up_client, db, kwargs, message):
    response = upload(signed_up_client, **kwargs)
    assert response.status_code == 400
    assert response.json()["error"] == message
    assert db.query(Case).count() == 0
    assert current_subscription(signed_up_client)["csvUploadsThisMonth"] == 0


@pytest.mark.integration
def test_upload_without_file(signed_up_client):
    response = signed_up_client.post("/api/cases", data={"name": "No file"})
    assert response.status_code == 400
    assert response.json()["error"] == "Please upload a file"


@pytest.mark.integration
def test_upload_too_large(tmp_path):
    from fastapi.testclient import TestClient
    from fraudlr.main import create_app

    app = create_app(make_settings(tmp_path, MAX_UPLOAD_BYTES=16))
    with TestClient(app) as c:
        signup(c)
        response = upload(c)
    assert response.status_code == 400
    assert "maximum size" in response.json()["error"]


@pytest.mark.integration
def test_upload_requires_session(client):
    assert upload(client).status_code == 401


# ---------------------------------------------------------------------------
# Read / delete
# ---------------------------------------------------------------------------

@pytest.mark.integration
def test_list_and_get_cases(signed_up_client):
    first = upload(signed_up_client, name="first").json()["case"]
    second = upload(signed_up_client, name="second").json()["case"]

    listed = signed_up_client.get("/api/cases").json()["cases"]
    assert {c["id"] for c in listed} == {first["id"], second["id"]}

    fetched = signed_up_client.get(f"/api/cases/{first['id']}")
    assert fetched.status_code == 200
    assert fetched.json()["case"]["name"] == "first"


@pytest.mark.integration
def test_cases_are_private(client):
    signup(client, email="owner@b.com")
    case_id = upload(client).json()["case"]["id"]

    signup(client, email="intruder@b.com")
    assert client.get("/api/cases").json() == {"cases": []}
    assert client.get(f"/api/cases/{case_id}").status_code == 404
    assert client.delete(f"/api/cases/{case_id}").status_code == 404


@pytest.mark.integration
def test_delete_case(signed_up_client, db):
    case_id = upload(signed_up_client).json()["case"]["id"]

    response = signed_up_client.delete(f"/api/cases/{case_id}")
    assert response.status_code == 200
    assert signed_up_client.get(f"/api/cases/{case_id}").status_code == 404
    assert db.query(Case).count() == 0
    # Deleting does not give the upload back
    assert current_subscription(signed_up_client)["csvUploadsThisMonth"] == 1


@pytest.mark.integration
def test_delete_case_removes_stored_file(signed_up_client, settings):
    case = upload(signed_up_client).json()["case"]
    stored = Path(settings.UPLOADS_DIR) / "cases" / case["fileUrl"].rsplit("/", 1)[1]
    assert stored.exists()

    assert signed_up_client.delete(f"/api/cases/{case['id']}").status_code == 200
    assert not stored.exists()


@pytest.mark.integration
def test_delete_case_with_missing_file(signed_up_client, settings):
    case = upload(signed_up_client).json()["case"]
    (Path(settings.UPLOADS_DIR) / "cases" / case["fileUrl"].rsplit("/", 1)[1]).unlink()

    assert signed_up_client.delete(f"/api/cases/{case['id']}").status_code == 200


@pytest.mark.integration
def test_unknown_case(signed_up_client):
    response = signed_up_client.get("/api/cases/does-not-exist")
    assert response.status_code == 404
    assert response.json()["error"] == "Case not found"


# ---------------------------------------------------------------------------
# Status transitions
# ---------------------------------------------------------------------------

def _pending_case(client, db) -> Case:
    case_id = upload(client).json()["case"]["id"]
    return db.get(Case, case_id)


def test_case_completes_with_results(signed_up_client, db):
    case = _pending_case(signed_up_client, db)

    advance_case_status(db, case, CaseStatus.PROCESSING)
    advance_case_status(db, case, CaseStatus.COMPLETED, results={"flagged": 3, "score": 0.82})

    body = signed_up_client.get(f"/api/cases/{case.id}").json()["case"]
    assert body["status"] == "COMPLETED"
    assert body["results"] == {"flagged": 3, "score": 0.82}


def test_failed_case_keeps_no_results(signed_up_client, db):
    case = _pending_case(signed_up_client, db)
    advance_case_status(db, case, "PROCESSING")
    advance_case_status(db, case, CaseStatus.FAILED, results={"partial": True})

    assert case.status == CaseStatus.FAILED
    assert case.results is None


@pytest.mark.parametrize(
    "path, target",
    [
        ([], CaseStatus.COMPLETED),
        ([], CaseStatus.PENDING),
        ([CaseStatus.PROCESSING, CaseStatus.COMPLETED], CaseStatus.PROCESSING),
        ([CaseStatus.FAILED], CaseStatus.PROCESSING),
    ],
)
def test_invalid_transitions(signed_up_client, db, path, target):
    case = _pending_case(signed_up_client, db)
    for step in path:
        advance_case_status(db, case, step)

    with pytest.raises(ValidationError):
        advance_case_status(db, case, target)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

@pytest.mark.parametrize(
    "filename, content_type, expected",
    [
        ("tx.csv", None, True),
        ("TX.CSV", "application/octet-stream", True),
        ("export", "text/csv; charset=utf-8", True),
        ("export", "application/vnd.ms-excel", True),
        ("tx.json", "application/json", False),
        (None, None, False),
    ],
)
def test_is_csv_upload(filename, content_type, expected):
    assert is_csv_upload(filename, content_type) is expected


def test_usage_counter_resets_only_across_months():
    subscription = Subscription(
        csv_uploads_this_month=2,
        usage_period_start=datetime(2024, 1, 1, tzinfo=timezone.utc),
    )

    assert check_and_reset_usage(subscription, now=datetime(2024, 1, 31, 23, 59, tzinfo=timezone.utc)) is False
    assert subscription.csv_uploads_this_month == 2

    assert check_and_reset_usage(subscription, now=datetime(2024, 2, 1, 0, 0, tzinfo=timezone.utc)) is True
    assert subscription.csv_uploads_this_month == 0
    assert subscription.usage_period_start == datetime(2024, 2, 1, tzinfo=timezone.utc)


def test_usage_period_stamped_when_missing():
    subscription = Subscription(csv_uploads_this_month=0, usage_period_start=None)
    assert check_and_reset_usage(subscription, now=datetime(2024, 5, 17, 9, 30, tzinfo=timezone.utc)) is True
    assert subscription.usage_period_start == datetime(2024, 5, 1, tzinfo=timezone.utc)
