import pytest
from datetime import datetime, timedelta, timezone

from backoffice.core.exceptions import NotFoundError
from backoffice.schemas.salary_slip import SalarySlipSubmission
from backoffice.services.payroll_service import PayrollService
from backoffice.services.slip_document import SlipDocumentGenerator, document_name

FORM = {
    "employeeName": "Alice Kumar",
    "empId": "E001",
    "email": "alice@example.com",
    "designation": "Developer",
    "month": "January",
    "year": "2024",
    "basic": "20000",
    "hra": "5000",
    "allowances": "2000",
    "pf": "1800",
    "tax": "1500",
    "otherDeductions": "200",
}

@pytest.fixture
def documents(slip_store, documents_dir):
    return SlipDocumentGenerator(slip_store, documents_dir)

@pytest.fixture
def payroll(slip_store, documents, clock):
    return PayrollService(slip_store, documents, clock=clock)

def _create(payroll, clock, **overrides):
    clock.tick()
    return payroll.create_slip(SalarySlipSubmission.model_validate({**FORM, **overrides}))

# --- service level ---

def test_create_slip_computes_totals(payroll, clock):
    slip = _create(payroll, clock, totalEarnings="1", netPay="999999")
    assert slip.total_earnings == 27000
    assert slip.total_deductions == 3500
    assert slip.net_pay == 23500
    assert slip.year == 2024
    assert slip.pdf_path is None

def test_create_slip_accepts_legacy_deductions_field(payroll, clock):
    form = {k: v for k, v in FORM.items() if k != "otherDeductions"}
    clock.tick()
    slip = payroll.create_slip(SalarySlipSubmission.model_validate({**form, "deductions": "300"}))
    assert slip.other_deductions == 300
    assert slip.total_deductions == 3600

def test_list_slips_filters_by_email_newest_first(payroll, clock):
    first = _create(payroll, clock)
    other = _create(payroll, clock, email="bob@example.com")
    latest = _create(payroll, clock)

    assert [s.id for s in payroll.list_slips()] == [latest.id, other.id, first.id]
    assert [s.id for s in payroll.list_slips(email="ALICE@example.com")] == [latest.id, first.id]

def test_get_missing_slip(payroll):
    with pytest.raises(NotFoundError):
        payroll.get_slip("missing")

def test_created_at_stays_utc_after_reload(payroll, clock):
    slip = _create(payroll, clock)

    reloaded = payroll.get_slip(slip.id)

    assert reloaded.created_at.utcoffset() == timedelta(0)
    assert reloaded.created_at == clock.now

def test_generate_writes_pdf_and_records_path(payroll, documents, documents_dir, clock):
    slip = _create(payroll, clock)

    pdf_path = documents.generate(slip.id)

    assert pdf_path == document_name(slip.id) == f"slip-{slip.id}.pdf"
    assert (documents_dir / pdf_path).read_bytes().startswith(b"%PDF")
    assert payroll.get_slip(slip.id).pdf_path == pdf_path

def test_generate_twice_overwrites_same_path(payroll, documents, documents_dir, clock, monkeypatch):
    slip = _create(payroll, clock)
    written = []
    original_write = documents._write

    def spy(name, content):
        written.append(name)
        return original_write(name, content)

    monkeypatch.setattr(documents, "_write", spy)

    first = documents.generate(slip.id)
    second = documents.generate(slip.id)

    assert written == [first, second]
    assert first == second
    assert payroll.get_slip(slip.id).pdf_path == second
    assert [p.name for p in documents_dir.iterdir()] == [second]

def test_generate_missing_slip(documents):
    with pytest.raises(NotFoundError):
        documents.generate("missing")

def test_attach_is_idempotent(payroll, documents, clock):
    slip = _create(payroll, clock)
    pdf_path = documents.generate(slip.id)

    assert documents.attach(slip.id).pdf_path == pdf_path
    assert documents.attach(slip.id).pdf_path == pdf_path

def test_attach_requires_written_document(payroll, documents, clock):
    slip = _create(payroll, clock)
    with pytest.raises(NotFoundError):
        documents.attach(slip.id)

def test_open_document_before_generation(payroll, documents, clock):
    slip = _create(payroll, clock)
    with pytest.raises(NotFoundError):
        documents.open_document(slip.id)

def test_open_document_when_file_removed(payroll, documents, documents_dir, clock):
    slip = _create(payroll, clock)
    pdf_path = documents.generate(slip.id)
    (documents_dir / pdf_path).unlink()
    with pytest.raises(NotFoundError):
        documents.open_document(slip.id)

def test_inline_generation_in_degraded_mode(slip_store, documents, clock):
    payroll = PayrollService(slip_store, documents, generate_inline=True, clock=clock)
    slip = _create(payroll, clock)
    assert slip.pdf_path == document_name(slip.id)
    assert documents.open_document(slip.id).is_file()

# --- HTTP level ---

def test_create_salary_slip_from_form(client):
    response = client.post("/api/salary-slips", data={**FORM, "netPay": "1"})
    assert response.status_code == 201
    data = response.json()
    assert data["totalEarnings"] == 27000
    assert data["totalDeductions"] == 3500
    assert data["netPay"] == 23500
    assert data["pdfPath"] is None

def test_create_salary_slip_from_json(client):
    response = client.post("/api/salary-slips", json={**FORM, "basic": 1000, "hra": "x"})
    assert response.status_code == 201
    assert response.json()["totalEarnings"] == 3000

def test_create_salary_slip_rejects_non_object_json(client):
    response = client.post("/api/salary-slips", json=["not", "a", "form"])
    assert response.status_code == 400

def test_list_salary_slips(client):
    client.post("/api/salary-slips", data=FORM)
    client.post("/api/salary-slips", data={**FORM, "email": "bob@example.com"})

    assert len(client.get("/api/salary-slips").json()) == 2
    only_bob = client.get("/api/salary-slips", params={"email": "bob@example.com"}).json()
    assert [s["email"] for s in only_bob] == ["bob@example.com"]

def test_generate_and_download_pdf(client):
    slip = client.post("/api/salary-slips", data=FORM).json()

    assert client.get(f"/api/salary-slips/{slip['id']}/pdf").status_code == 404

    response = client.post(f"/api/salary-slips/{slip['id']}/generate")
    assert response.status_code == 200
    assert response.json() == {"pdfPath": f"slip-{slip['id']}.pdf"}

    download = client.get(f"/api/salary-slips/{slip['id']}/pdf")
    assert download.status_code == 200
    assert download.headers["content-type"] == "application/pdf"
    assert download.content.startswith(b"%PDF")

def test_generate_unknown_slip_is_404(client):
    assert client.post("/api/salary-slips/missing/generate").status_code == 404
    assert client.get("/api/salary-slips/missing/pdf").status_code == 404
    assert client.get("/api/salary-slips/missing").status_code == 404

def test_degraded_mode_generates_document_on_create(degraded_client):
    response = degraded_client.post("/api/salary-slips", data=FORM)
    assert response.status_code == 201
    slip = response.json()
    assert slip["pdfPath"] == f"slip-{slip['id']}.pdf"

    download = degraded_client.get(f"/api/salary-slips/{slip['id']}/pdf")
    assert download.status_code == 200
