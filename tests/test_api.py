"""Tests for the JSON HTTP API."""

from __future__ import annotations

import pytest
from aiohttp.test_utils import TestClient, TestServer

from phishledger.api import ApiServer
from phishledger.classifier import ClassificationVerdict
from phishledger.errors import (
    ClassificationUnavailableError,
    LedgerRejectedError,
    NotFoundError,
    UnauthorizedError,
)
from phishledger.ledger.models import Report, TransactionReceipt
from phishledger.reporter import ReportOrchestrator, ReportService, StatusProjector

WALLET = "0x70997970C51812dc3A010C7d01b50e0d17dc79C8"
REPORTER = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
RECEIPT = TransactionReceipt(tx_hash="0x" + "cd" * 32, block_number=77, gas_used=61_000)


class _FakeClassifier:
    def __init__(self, prediction: str = "phishing", error: Exception | None = None):
        self.prediction = prediction
        self.error = error

    async def classify(self, url):
        if self.error:
            raise self.error
        return ClassificationVerdict(prediction=self.prediction, is_benign=self.prediction == "benign")


class _FakeLedger:
    def __init__(self, *, status_error: Exception | None = None):
        self.status_error = status_error
        self.reports: list[Report] = []

    async def submit_report(self, domain, accused_wallet, evidence_hash, is_accusation):
        self.reports.append(
            Report(
                index=len(self.reports),
                domain=domain,
                accused_wallet=accused_wallet,
                reporter=REPORTER,
                evidence_hash=bytes(evidence_hash),
                timestamp=1_700_000_000,
                status_code=0,
            )
        )
        return RECEIPT

    async def set_status(self, index, status):
        if self.status_error:
            raise self.status_error
        if index >= len(self.reports):
            raise NotFoundError(f"Report {index} does not exist (total reports: {len(self.reports)})")
        return RECEIPT

    async def is_wallet_banned(self, wallet):
        return False

    async def is_domain_banned(self, domain):
        return False

    async def get_total_reports(self):
        return len(self.reports)

    async def get_report(self, index, *, total=None):
        return self.reports[index]


class _FakeRewards:
    def __init__(self, error: Exception | None = None):
        self.error = error

    async def register_report(self, reporter_wallet, evidence_hash):
        if self.error:
            raise self.error
        return RECEIPT


def _server(*, classifier=None, ledger=None, rewards=None) -> ApiServer:
    ledger = ledger or _FakeLedger()
    orchestrator = ReportOrchestrator(
        classifier or _FakeClassifier(),
        ledger,
        rewards if rewards is not None else _FakeRewards(),
    )
    return ApiServer(ReportService(orchestrator, StatusProjector(ledger)))


@pytest.mark.asyncio
async def test_healthz():
    async with TestClient(TestServer(_server().app)) as client:
        resp = await client.get("/healthz")
        assert resp.status == 200
        assert (await resp.json())["ok"] is True


@pytest.mark.asyncio
async def test_submit_report_returns_receipt_and_cors_headers():
    async with TestClient(TestServer(_server().app)) as client:
        resp = await client.post(
            "/submitReport",
            json={"url": "https://evil.example/login", "accusedWallet": WALLET},
        )
        assert resp.status == 200
        assert resp.headers["Access-Control-Allow-Origin"] == "http://localhost:5173"
        data = await resp.json()

    assert data["status"] == "success"
    assert data["message"] == "Report submitted successfully"
    assert data["prediction"] == "phishing"
    assert data["blockchainSubmission"] is True
    assert data["txHash"] == RECEIPT.tx_hash
    assert data["blockNumber"] == "77"
    assert data["gasUsed"] == "61000"


@pytest.mark.asyncio
async def test_benign_report_is_not_submitted():
    ledger = _FakeLedger()
    async with TestClient(TestServer(_server(classifier=_FakeClassifier("benign"), ledger=ledger).app)) as client:
        resp = await client.post(
            "/submitReport",
            json={"url": "https://example.com", "accusedWallet": WALLET},
        )
        assert resp.status == 200
        data = await resp.json()

    assert data["blockchainSubmission"] is False
    assert "txHash" not in data
    assert ledger.reports == []


@pytest.mark.asyncio
async def test_bad_and_safe_examples_end_to_end():
    ledger = _FakeLedger()
    async with TestClient(TestServer(_server(ledger=ledger).app)) as client:
        resp = await client.post("/submitReport", json={"url": "http://bad.example", "accusedWallet": WALLET})
        assert resp.status == 200
        assert (await resp.json())["blockchainSubmission"] is True

    safe_ledger = _FakeLedger()
    server = _server(classifier=_FakeClassifier("benign"), ledger=safe_ledger)
    async with TestClient(TestServer(server.app)) as client:
        resp = await client.post("/submitReport", json={"url": "http://safe.example", "accusedWallet": WALLET})
        assert resp.status == 200
        data = await resp.json()

    assert data["blockchainSubmission"] is False
    assert [r.domain for r in ledger.reports] == ["http://bad.example"]
    assert safe_ledger.reports == []


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body",
    [
        {"accusedWallet": WALLET},
        {"url": "https://evil.example", "accusedWallet": "nope"},
        {"url": "javascript:alert(1)", "accusedWallet": WALLET},
    ],
)
async def test_submit_report_invalid_input_is_400(body):
    async with TestClient(TestServer(_server().app)) as client:
        resp = await client.post("/submitReport", json=body)
        assert resp.status == 400
        data = await resp.json()
    assert data["status"] == "failed"
    assert data["error"]["kind"] == "invalid_input"


@pytest.mark.asyncio
async def test_malformed_json_body_is_400():
    async with TestClient(TestServer(_server().app)) as client:
        resp = await client.post(
            "/submitReport", data="{not json", headers={"Content-Type": "application/json"}
        )
        assert resp.status == 400
        assert (await resp.json())["error"]["kind"] == "invalid_input"

        resp = await client.post("/verifyReport", json=[1, 2])
        assert resp.status == 400


@pytest.mark.asyncio
async def test_classifier_outage_is_503():
    server = _server(classifier=_FakeClassifier(error=ClassificationUnavailableError("timed out")))
    async with TestClient(TestServer(server.app)) as client:
        resp = await client.post(
            "/submitReport",
            json={"url": "https://evil.example", "accusedWallet": WALLET},
        )
        assert resp.status == 503
        assert (await resp.json())["error"]["kind"] == "classification_unavailable"


@pytest.mark.asyncio
async def test_user_report_success_and_partial_failure():
    async with TestClient(TestServer(_server().app)) as client:
        resp = await client.post("/submitUserReport", json={"url": "http://bad.io", "userWallet": WALLET})
        assert resp.status == 200
        data = await resp.json()
        assert data["reward"]["txHash"] == RECEIPT.tx_hash
        assert data["evidenceScheme"] == "padded_ascii"

    server = _server(rewards=_FakeRewards(error=LedgerRejectedError("reward reverted")))
    async with TestClient(TestServer(server.app)) as client:
        resp = await client.post("/submitUserReport", json={"url": "http://bad.io", "userWallet": WALLET})
        assert resp.status == 207
        data = await resp.json()
        assert data["status"] == "partial"
        assert data["txHash"] == RECEIPT.tx_hash
        assert data["error"]["kind"] == "partial_failure"


@pytest.mark.asyncio
async def test_list_reports_after_submission():
    async with TestClient(TestServer(_server().app)) as client:
        await client.post(
            "/submitReport",
            json={"url": "https://evil.example/login", "accusedWallet": WALLET},
        )
        resp = await client.get("/reports")
        assert resp.status == 200
        data = await resp.json()

    assert data["totalReports"] == 1
    report = data["reports"][0]
    assert report["id"] == 0
    assert report["domain"] == "https://evil.example/login"
    assert report["accusedWallet"] == WALLET
    assert report["status"] == "Reported"
    assert report["evidenceHash"].startswith("0x") and len(report["evidenceHash"]) == 66


@pytest.mark.asyncio
async def test_verify_report_routes():
    async with TestClient(TestServer(_server().app)) as client:
        resp = await client.post("/verifyReport", json={"reportId": 0})
        assert resp.status == 404
        assert (await resp.json())["error"]["kind"] == "not_found"

        await client.post(
            "/submitReport",
            json={"url": "https://evil.example/login", "accusedWallet": WALLET},
        )
        resp = await client.post("/verifyReport", json={"reportId": "0"})
        assert resp.status == 200
        data = await resp.json()
        assert data["message"] == "Report 0 marked as Verified"

        resp = await client.post("/rejectReport", json={"reportId": 0})
        assert resp.status == 200
        assert (await resp.json())["reportStatus"] == "Rejected"

        resp = await client.post("/verifyReport", json={"reportId": -1})
        assert resp.status == 400


@pytest.mark.asyncio
async def test_unauthorized_verification_is_403():
    ledger = _FakeLedger(status_error=UnauthorizedError("not the ledger authority"))
    async with TestClient(TestServer(_server(ledger=ledger).app)) as client:
        resp = await client.post("/verifyReport", json={"reportId": 0})
        assert resp.status == 403


@pytest.mark.asyncio
async def test_preflight_options_request():
    async with TestClient(TestServer(_server().app)) as client:
        resp = await client.options(
            "/submitReport",
            headers={"Origin": "http://localhost:5173", "Access-Control-Request-Method": "POST"},
        )
        assert resp.status == 204
        assert "POST" in resp.headers["Access-Control-Allow-Methods"]
        assert resp.headers["Access-Control-Allow-Credentials"] == "true"


@pytest.mark.asyncio
async def test_unknown_route_still_carries_cors_headers():
    async with TestClient(TestServer(_server().app)) as client:
        resp = await client.get("/nope")
        assert resp.status == 404
        assert resp.headers["Access-Control-Allow-Origin"] == "http://localhost:5173"
