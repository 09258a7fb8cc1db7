import csv
import io
from datetime import datetime

import pytest
from openpyxl import load_workbook

from fieldreport.models import AuditLog, DealerSubmission, SUBMISSION_MODELS

VALID_PAYLOADS = {
    "depo": {
        "area": "North Zone",
        "accompaniedBy": "Suresh",
        "personMet": "Depot Manager",
        "competitionActivity": "Free gifts with subscriptions",
        "outcome": "Agreed to extra copies",
    },
    "vendor": {"area": "Market Road", "vendorName": "Kumar", "phone": "+91 98765 43210"},
    "dealer": {
        "area": "Station Road",
        "dealerName": "Sharma Agencies",
        "duesAmount": 1500.5,
        "collectionMode": "Cheque",
        "collectionAmount": 1000,
        "competitionNewspapers": [{"name": "Daily Star", "number": 40}, {"name": "Morning Post"}],
    },
    "stall": {"area": "Bus Stand", "stallOwner": "Mohan", "collectionMode": ""},
    "reader": {
        "area": "Green Park",
        "readerName": "Anita",
        "contactDetails": "9876500000",
        "presentReading": ["Daily Star"],
    },
    "ooh": {
        "area": "Airport",
        "segment": "Hotels",
        "contactPerson": "Front Desk",
        "existingNewspaper": ["Morning Post", "Daily Star"],
    },
}


@pytest.mark.parametrize("type_", sorted(VALID_PAYLOADS))
def test_create_each_type(client, field_user, auth_headers, db_session, type_):
    payload = dict(VALID_PAYLOADS[type_], type=type_)
    resp = client.post("/submissions", json=payload, headers=auth_headers(field_user))
    assert resp.status_code == 201, resp.json()
    body = resp.json()
    assert body["type"] == type_

    record = db_session.get(SUBMISSION_MODELS[type_], body["id"])
    assert record.user_id == field_user.id
    assert record.area == payload["area"]

    event = db_session.query(AuditLog).filter_by(action="SUBMISSION_CREATED").one()
    assert event.meta == {"type": type_, "submission_id": body["id"]}


def test_dealer_values_are_normalised(client, field_user, auth_headers, db_session):
    payload = dict(VALID_PAYLOADS["dealer"], type="dealer", area="  Station Road  ")
    resp = client.post("/submissions", json=payload, headers=auth_headers(field_user))
    record = db_session.get(DealerSubmission, resp.json()["id"])
    assert record.area == "Station Road"
    assert record.dues_amount == 1500.5
    assert record.competition_newspapers == [
        {"name": "Daily Star", "number": "40"},
        {"name": "Morning Post", "number": None},
    ]


def test_create_accepts_snake_case_keys(client, field_user, auth_headers, db_session):
    payload = {"type": "depo", "area": "North", "person_met": "Ravi", "competition_activity": "Discounts"}
    resp = client.post("/submissions", json=payload, headers=auth_headers(field_user))
    assert resp.status_code == 201
    record = db_session.get(SUBMISSION_MODELS["depo"], resp.json()["id"])
    assert record.competition_activity == "Discounts"


def test_unknown_type_rejected(client, field_user, auth_headers):
    resp = client.post("/submissions", json={"type": "kiosk", "area": "North"}, headers=auth_headers(field_user))
    assert resp.status_code == 400
    assert resp.json()["error"] == "Invalid submission type"


def test_missing_required_field_rejected(client, field_user, auth_headers):
    payload = {"type": "depo", "area": "North", "personMet": "Ravi"}
    resp = client.post("/submissions", json=payload, headers=auth_headers(field_user))
    assert resp.status_code == 400
    fields = [d["field"] for d in resp.json()["details"]]
    assert any(f.endswith("competitionActivity") for f in fields)


@pytest.mark.parametrize(
    "override",
    [
        {"duesAmount": -1},
        {"collectionMode": "Barter"},
        {"area": "   "},
    ],
)
def test_invalid_dealer_values_rejected(client, field_user, auth_headers, override):
    payload = dict(VALID_PAYLOADS["dealer"], type="dealer", **override)
    resp = client.post("/submissions", json=payload, headers=auth_headers(field_user))
    assert resp.status_code == 400


def test_invalid_ooh_segment_rejected(client, field_user, auth_headers):
    payload = dict(VALID_PAYLOADS["ooh"], type="ooh", segment="Airports")
    resp = client.post("/submissions", json=payload, headers=auth_headers(field_user))
    assert resp.status_code == 400


def test_pending_reset_cannot_submit(client, make_user, auth_headers):
    user = make_user("pending@example.com", force_reset=True)
    payload = dict(VALID_PAYLOADS["depo"], type="depo")
    resp = client.post("/submissions", json=payload, headers=auth_headers(user))
    assert resp.status_code == 403


def test_listing_requires_staff(client, field_user, auth_headers):
    assert client.get("/submissions", headers=auth_headers(field_user)).status_code == 403


def test_listing_combines_types_newest_first(client, admin, field_user, auth_headers, add_submission):
    add_submission(field_user, "depo", submitted_at=datetime(2026, 3, 1, 9, 0))
    add_submission(field_user, "ooh", submitted_at=datetime(2026, 3, 3, 9, 0))
    add_submission(field_user, "dealer", submitted_at=datetime(2026, 3, 2, 9, 0))

    resp = client.get("/submissions", headers=auth_headers(admin))
    assert resp.status_code == 200
    body = resp.json()
    assert [row["type"] for row in body["data"]] == ["ooh", "dealer", "depo"]
    assert body["data"][0]["contact"] == "Manager"
    assert body["data"][0]["userEmail"] == field_user.email
    assert body["pagination"] == {"page": 1, "limit": 20, "total": 3, "totalPages": 1}


def test_listing_pagination_reports_real_total(client, admin, field_user, auth_headers, add_submission):
    for day in range(1, 6):
        add_submission(field_user, "vendor", submitted_at=datetime(2026, 4, day, 12, 0))

    resp = client.get("/submissions", params={"page": 2, "limit": 2}, headers=auth_headers(admin))
    body = resp.json()
    assert len(body["data"]) == 2
    assert body["pagination"] == {"page": 2, "limit": 2, "total": 5, "totalPages": 3}
    assert body["data"][0]["submittedAt"].startswith("2026-04-03")


def test_listing_filters(client, admin, field_user, make_user, auth_headers, add_submission):
    other = make_user("other@example.com")
    add_submission(field_user, "depo", area="North Zone", submitted_at=datetime(2026, 5, 10, 8, 0))
    add_submission(field_user, "stall", area="south zone", submitted_at=datetime(2026, 5, 12, 23, 30))
    add_submission(other, "depo", area="100% Market", submitted_at=datetime(2026, 5, 20, 8, 0))
    headers = auth_headers(admin)

    def types(**params):
        return sorted(row["type"] + ":" + row["area"] for row in client.get(
            "/submissions", params=params, headers=headers
        ).json()["data"])

    assert types(type="depo") == ["depo:100% Market", "depo:North Zone"]
    assert types(area="ZONE") == ["depo:North Zone", "stall:south zone"]
    assert types(area="100%") == ["depo:100% Market"]
    assert types(user=other.id) == ["depo:100% Market"]
    assert types(**{"from": "2026-05-11", "to": "2026-05-12"}) == ["stall:south zone"]


def test_listing_rejects_unknown_type_and_bad_paging(client, admin, auth_headers):
    headers = auth_headers(admin)
    bad_type = client.get("/submissions", params={"type": "kiosk"}, headers=headers)
    assert bad_type.status_code == 400
    assert bad_type.json()["error"] == "Invalid submission type"
    assert client.get("/submissions", params={"limit": 101}, headers=headers).status_code == 400
    assert client.get("/submissions", params={"page": 0}, headers=headers).status_code == 400


def test_submission_detail(client, admin, field_user, auth_headers, add_submission):
    record = add_submission(
        field_user,
        "dealer",
        dues_amount=200,
        collection_mode="Cash",
        competition_newspapers=[{"name": "Daily Star", "number": "12"}],
    )
    resp = client.get(f"/submissions/dealer/{record.id}", headers=auth_headers(admin))
    assert resp.status_code == 200
    body = resp.json()
    assert body["type"] == "dealer"
    assert body["dealerName"] == "Sharma Agencies"
    assert body["duesAmount"] == 200
    assert body["collectionMode"] == "Cash"
    assert body["userEmail"] == field_user.email
    assert body["competitionNewspapers"] == [{"name": "Daily Star", "number": "12"}]
    assert "dealer_name" not in body


def test_submission_detail_errors(client, admin, auth_headers):
    headers = auth_headers(admin)
    assert client.get("/submissions/kiosk/1", headers=headers).status_code == 400
    missing = client.get("/submissions/depo/999", headers=headers)
    assert missing.status_code == 404
    assert missing.json()["error"] == "Submission not found"


def test_areas_are_distinct_and_sorted(client, field_user, auth_headers, add_submission):
    add_submission(field_user, "depo", area="West")
    add_submission(field_user, "ooh", area="East")
    add_submission(field_user, "ooh", area="West")
    headers = auth_headers(field_user)

    assert client.get("/submissions/areas", headers=headers).json() == ["East", "West"]
    assert client.get("/submissions/areas", params={"type": "ooh"}, headers=headers).json() == ["East", "West"]
    assert client.get("/submissions/areas", params={"type": "depo"}, headers=headers).json() == ["West"]


def test_export_csv(client, admin, field_user, auth_headers, add_submission, db_session):
    add_submission(field_user, "depo", area="North", submitted_at=datetime(2026, 6, 1, 10, 0))
    add_submission(
        field_user,
        "dealer",
        area="South",
        submitted_at=datetime(2026, 6, 2, 10, 0),
        competition_newspapers=[{"name": "Daily Star", "number": "5"}],
    )

    resp = client.get("/submissions/export", headers=auth_headers(admin))
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/csv")
    assert "attachment; filename=submissions_" in resp.headers["content-disposition"]

    rows = list(csv.DictReader(io.StringIO(resp.text)))
    assert [row["Type"] for row in rows] == ["dealer", "depo"]
    assert rows[0]["Competition Newspapers"] == "Daily Star (5)"
    assert rows[1]["Person Met"] == "Ravi"
    assert rows[0]["User Email"] == field_user.email

    event = db_session.query(AuditLog).filter_by(action="SUBMISSIONS_EXPORTED").one()
    assert event.meta["rows"] == 2


def test_export_xlsx_with_type_filter(client, admin, field_user, auth_headers, add_submission):
    add_submission(field_user, "vendor", area="Market")
    add_submission(field_user, "depo", area="North")

    resp = client.get("/submissions/export", params={"format": "xlsx", "type": "vendor"}, headers=auth_headers(admin))
    assert resp.status_code == 200

    ws = load_workbook(io.BytesIO(resp.content)).active
    header = [cell.value for cell in ws[1]]
    assert header[:5] == ["ID", "Type", "Area", "User Email", "Submitted At"]
    assert "Vendor Name" in header
    assert "Person Met" not in header
    assert ws.max_row == 2


def test_export_rejects_unknown_format(client, admin, auth_headers):
    resp = client.get("/submissions/export", params={"format": "pdf"}, headers=auth_headers(admin))
    assert resp.status_code == 400


def test_export_neutralises_formula_cells(client, admin, field_user, auth_headers, add_submission):
    add_submission(field_user, "depo", area="North", person_met="=HYPERLINK(\"http://evil.test\")")

    resp = client.get("/submissions/export", params={"type": "depo"}, headers=auth_headers(admin))
    rows = list(csv.DictReader(io.StringIO(resp.text)))
    assert rows[0]["Person Met"] == "'=HYPERLINK(\"http://evil.test\")"
    assert rows[0]["Area"] == "North"
