import pytest
from fastapi.testclient import TestClient

from config import Settings
from main import create_app


@pytest.fixture
def client(tmp_path):
    settings = Settings(
        database_url=f"sqlite:///{tmp_path / 'api.db'}",
        upload_dir=str(tmp_path / "uploads"),
        public_base_url="http://testserver",
    )
    with TestClient(create_app(settings)) as c:
        yield c


@pytest.fixture
def example_pdf(make_pdf):
    return make_pdf()


def upload(client, pdf, filename="documento_valido.pdf", comment=None):
    data = {"comment": comment} if comment else None
    resp = client.post(
        "/documents/upload", files={"file": (filename, pdf, "application/pdf")}, data=data
    )
    assert resp.status_code == 201, resp.text
    return resp.json()


def test_rechaza_docx(client):
    files = {"file": ("doc_no.pdf", b"This is not a PDF docx",
                      "application/vnd.openxmlformats-officedocument.wordprocessingml.document")}
    resp = client.post("/documents/upload", files=files)

    assert resp.status_code == 400
    assert resp.json()["error"] == "validation_error"


def test_subir_pdf_valido(client, example_pdf):
    body = upload(client, example_pdf, comment="please review")

    assert isinstance(body["documentId"], int)
    assert body["caseId"] == "000001"

    details = client.get(f"/documents/{body['documentId']}").json()
    assert details["status"] == "Draft"
    assert details["comment"] == "please review"
    assert details["allowedTransitions"] == ["Signed"]


def test_next_case_id(client, example_pdf):
    assert client.get("/documents/next-case-id").json() == {"nextCaseId": "000001"}
    upload(client, example_pdf)
    assert client.get("/documents/next-case-id").json() == {"nextCaseId": "000002"}


def test_full_approval_round_trip(client, example_pdf):
    document_id = upload(client, example_pdf)["documentId"]

    signed = client.post(f"/documents/{document_id}/sign")
    assert signed.status_code == 200
    assert signed.json()["fileLocation"] == "/uploads/000001.pdf"

    again = client.post(f"/documents/{document_id}/sign")
    assert again.status_code == 409
    assert again.json()["error"] == "conflict"

    added = client.post(
        f"/documents/{document_id}/approvers",
        json={"approverEmails": ["alice@example.com", "bob@example.com"]},
    )
    assert added.status_code == 200
    links = added.json()["approvalLinks"]
    assert len(links) == 2
    assert links[0]["link"].startswith("http://testserver/approvals/")

    approver_ids = [a["id"] for a in client.get(f"/documents/{document_id}").json()["approvers"]]

    first = client.post(f"/approvals/{approver_ids[0]}", json={"action": "Approve"})
    assert first.json()["documentStatus"] == "WaitingForApproval"

    last = client.post(
        f"/approvals/{approver_ids[1]}", json={"action": "Approve", "documentId": document_id}
    )
    assert last.status_code == 200
    assert last.json()["documentStatus"] == "FinalApproved"

    repeated = client.post(f"/approvals/{approver_ids[1]}", json={"action": "Disapprove"})
    assert repeated.status_code == 409

    download = client.get(f"/documents/{document_id}/download")
    assert download.status_code == 200
    assert download.headers["content-type"] == "application/pdf"
    assert download.content.startswith(b"%PDF")

    static = client.get("/uploads/000001.pdf")
    assert static.status_code == 200
    assert static.content == download.content


def test_approvers_on_draft_conflict(client, example_pdf):
    document_id = upload(client, example_pdf)["documentId"]
    resp = client.post(f"/documents/{document_id}/approvers", json={"approverEmails": ["alice@example.com"]})
    assert resp.status_code == 409


def test_invalid_vote_action(client, example_pdf):
    document_id = upload(client, example_pdf)["documentId"]
    client.post(f"/documents/{document_id}/sign")
    client.post(f"/documents/{document_id}/approvers", json={"approverEmails": ["alice@example.com"]})
    approver_id = client.get(f"/documents/{document_id}").json()["approvers"][0]["id"]

    resp = client.post(f"/approvals/{approver_id}", json={"action": "Maybe"})
    assert resp.status_code == 400


def test_not_found(client):
    assert client.get("/documents/999").status_code == 404
    assert client.post("/documents/999/sign").status_code == 404
    assert client.post("/approvals/999", json={"action": "Approve"}).status_code == 404


def test_list_documents(client, example_pdf):
    upload(client, example_pdf)
    upload(client, example_pdf)

    body = client.get("/documents").json()
    assert body["totalCount"] == 2
    assert [d["caseId"] for d in body["documents"]] == ["000002", "000001"]
    assert body["documents"][0]["totalApprovers"] == 0


def test_predefined_approvers_are_seeded(client):
    resp = client.get("/approvers/predefined")
    assert resp.status_code == 200
    names = [a["name"] for a in resp.json()]
    assert names == sorted(names)
    assert len(names) > 0


def test_reset(client, example_pdf):
    upload(client, example_pdf)

    resp = client.post("/admin/reset")
    assert resp.status_code == 200
    assert resp.json()["documentsDeleted"] == 1
    assert client.get("/documents").json()["totalCount"] == 0


def test_open_approval_link(client, example_pdf):
    document_id = upload(client, example_pdf)["documentId"]
    client.post(f"/documents/{document_id}/sign")
    links = client.post(
        f"/documents/{document_id}/approvers", json={"approverEmails": ["alice@example.com"]}
    ).json()["approvalLinks"]

    opened = client.get(links[0]["link"])
    assert opened.status_code == 200
    body = opened.json()
    assert body["email"] == "alice@example.com"
    assert body["caseId"] == "000001"
    assert body["documentStatus"] == "WaitingForApproval"
    assert body["availableActions"] == ["Approve", "Disapprove"]
    assert body["downloadUrl"] == f"http://testserver/documents/{document_id}/download"

    client.post(f"/approvals/{body['approverId']}", json={"action": "Approve"})
    after = client.get(links[0]["link"]).json()
    assert after["approverStatus"] == "Approved"
    assert after["availableActions"] == []

    assert client.get("/approvals/999").status_code == 404


def test_malformed_requests_share_the_error_shape(client, example_pdf):
    document_id = upload(client, example_pdf)["documentId"]
    client.post(f"/documents/{document_id}/sign")

    bad_email = client.post(f"/documents/{document_id}/approvers", json={"approverEmails": ["not-an-email"]})
    assert bad_email.status_code == 400
    assert bad_email.json()["error"] == "validation_error"

    client.post(f"/documents/{document_id}/approvers", json={"approverEmails": ["alice@example.com"]})
    approver_id = client.get(f"/documents/{document_id}").json()["approvers"][0]["id"]

    missing_action = client.post(f"/approvals/{approver_id}", json={})
    assert missing_action.status_code == 400
    assert missing_action.json()["error"] == "validation_error"
    assert "action" in missing_action.json()["detail"]
