"""Tests for advisory predictions — parsing, Gemini client, heuristic fallback."""

from __future__ import annotations

import asyncio
import json

import httpx
import pytest
from pydantic import SecretStr

from plantguard.core.config import PredictionConfig
from plantguard.core.types import (
    AshReadings,
    Domain,
    EmissionReadings,
    EquipmentReadings,
    LoadReadings,
    Reading,
    Severity,
    Snapshot,
    Violation,
)
from plantguard.prediction.exceptions import PredictionError
from plantguard.prediction.service import (
    Advisor,
    GeminiPredictionService,
    HeuristicPredictor,
    Prediction,
    PredictionService,
    build_prompt,
    create_advisor,
    parse_prediction,
)


# ── Helpers ─────────────────────────────────────────────────────


def _config(**kw: object) -> PredictionConfig:
    defaults: dict[str, object] = {"enabled": True, "api_key": SecretStr("gk-test")}
    defaults.update(kw)
    return PredictionConfig(**defaults)  # type: ignore[arg-type]


def _emission_snapshot() -> Snapshot:
    snap = Snapshot(id="em-1", readings=EmissionReadings(
        sox=Reading(value=260, unit="mg/Nm3", threshold=200),
    ))
    snap.violations.append(Violation(
        snapshot_id="em-1", domain=Domain.EMISSION, parameter="sox",
        value=260, threshold=200, severity=Severity.CRITICAL,
    ))
    return snap


def _gemini_reply(text: str) -> dict:
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


def _service(handler: object) -> GeminiPredictionService:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))  # type: ignore[arg-type]
    return GeminiPredictionService(_config(), client=client)


class FailingService(PredictionService):
    async def predict(self, domain: Domain, snapshot: Snapshot) -> Prediction:
        raise PredictionError("quota exceeded")


class QuickService(PredictionService):
    async def predict(self, domain: Domain, snapshot: Snapshot) -> Prediction:
        return Prediction(summary="SOx trending up", source="gemini")


class SlowService(PredictionService):
    async def predict(self, domain: Domain, snapshot: Snapshot) -> Prediction:
        await asyncio.sleep(1.0)
        return Prediction(summary="late")


# ── Parsing ─────────────────────────────────────────────────────


class TestParsePrediction:
    def test_json_inside_prose(self) -> None:
        text = 'Here you go:\n```json\n{"summary": "SOx high", "recommendedActions": ["check FGD"]}\n```'
        pred = parse_prediction(Domain.EMISSION, text)
        assert pred.summary == "SOx high"
        assert pred.recommended_actions == ["check FGD"]
        assert pred.source == "gemini"

    def test_equipment_summary(self) -> None:
        text = '{"riskLevel": "High", "maintenanceDue": "2024-05-01", "recommendedActions": []}'
        pred = parse_prediction(Domain.EQUIPMENT, text)
        assert pred.summary == "Risk level High, maintenance due 2024-05-01"

    def test_load_summary(self) -> None:
        pred = parse_prediction(Domain.LOAD, '{"peakHour": "18:00", "peakLoad": 2050}')
        assert pred.summary == "Peak load 2050 MW at 18:00"

    def test_ash_uses_utilization_as_actions(self) -> None:
        text = '{"disposalNeeded": true, "daysToCapacity": 12, "recommendedUtilization": ["cement"]}'
        pred = parse_prediction(Domain.ASH, text)
        assert pred.summary == "12 days to storage capacity, disposal needed"
        assert pred.recommended_actions == ["cement"]

    def test_no_json(self) -> None:
        with pytest.raises(PredictionError):
            parse_prediction(Domain.LOAD, "I cannot help with that")

    def test_invalid_json(self) -> None:
        with pytest.raises(PredictionError):
            parse_prediction(Domain.LOAD, "{not json}")


class TestBuildPrompt:
    def test_emission_prompt_lists_readings(self) -> None:
        prompt = build_prompt(Domain.EMISSION, _emission_snapshot())
        assert "SOx: 260 mg/Nm3 (limit 200)" in prompt
        assert "JSON" in prompt

    def test_equipment_prompt(self) -> None:
        snap = Snapshot(readings=EquipmentReadings(equipment_name="Turbine 1", equipment_type="turbine"))
        assert "Turbine 1 (turbine)" in build_prompt(Domain.EQUIPMENT, snap)

    def test_load_and_ash_prompts(self) -> None:
        load = Snapshot(readings=LoadReadings(demand_mw=2030))
        ash = Snapshot(readings=AshReadings(fly_ash_stored=46500))
        assert "power grid analyst" in build_prompt(Domain.LOAD, load)
        assert "ash management expert" in build_prompt(Domain.ASH, ash)


# ── Gemini client ───────────────────────────────────────────────


class TestGeminiPredictionService:
    async def test_predict(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            reply = json.dumps({"summary": "SOx trending up", "recommendedActions": ["a", "b"]})
            return httpx.Response(200, json=_gemini_reply(reply))

        svc = _service(handler)
        pred = await svc.predict(Domain.EMISSION, _emission_snapshot())
        await svc.close()

        assert pred.summary == "SOx trending up"
        assert pred.recommended_actions == ["a", "b"]
        assert seen[0].url.path.endswith("/gemini-pro:generateContent")
        assert seen[0].url.params["key"] == "gk-test"
        body = json.loads(seen[0].content)
        assert "SOx" in body["contents"][0]["parts"][0]["text"]

    async def test_http_error(self) -> None:
        svc = _service(lambda request: httpx.Response(429, json={"error": "quota"}))
        with pytest.raises(PredictionError, match="429"):
            await svc.predict(Domain.EMISSION, _emission_snapshot())

    async def test_transport_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("dns failure", request=request)

        svc = _service(handler)
        with pytest.raises(PredictionError):
            await svc.predict(Domain.EMISSION, _emission_snapshot())

    async def test_unexpected_shape(self) -> None:
        svc = _service(lambda request: httpx.Response(200, json={"candidates": []}))
        with pytest.raises(PredictionError):
            await svc.predict(Domain.EMISSION, _emission_snapshot())


# ── Heuristic and Advisor ───────────────────────────────────────


class TestHeuristicPredictor:
    def test_advice_from_violations(self) -> None:
        pred = HeuristicPredictor().advise(Domain.EMISSION, _emission_snapshot())
        assert pred.summary == "Critical risk: SOx out of range"
        assert pred.recommended_actions == ["Check flue gas desulphurisation unit"]
        assert pred.source == "heuristic"

    def test_no_violations(self) -> None:
        snap = Snapshot(readings=LoadReadings(demand_mw=100))
        pred = HeuristicPredictor().advise(Domain.LOAD, snap)
        assert pred.summary == "Load parameters within limits"

    def test_as_text(self) -> None:
        pred = Prediction(summary="High risk", recommended_actions=["a", "b"])
        assert pred.as_text() == "High risk. Actions: a; b"


class TestAdvisor:
    async def test_without_service_uses_heuristic(self) -> None:
        pred = await Advisor().advise(Domain.EMISSION, _emission_snapshot())
        assert pred.source == "heuristic"

    async def test_service_failure_falls_back(self) -> None:
        pred = await Advisor(FailingService()).advise(Domain.EMISSION, _emission_snapshot())
        assert pred.source == "heuristic"

    async def test_timeout_falls_back(self) -> None:
        advisor = Advisor(SlowService(), timeout_secs=0.01)
        pred = await advisor.advise(Domain.EMISSION, _emission_snapshot())
        assert pred.source == "heuristic"

    def test_create_advisor_disabled(self) -> None:
        advisor = create_advisor(PredictionConfig())
        assert advisor._service is None

    def test_create_advisor_enabled(self) -> None:
        advisor = create_advisor(_config())
        assert isinstance(advisor._service, GeminiPredictionService)

    def test_immediate_is_heuristic(self) -> None:
        pred = Advisor(SlowService()).immediate(Domain.EMISSION, _emission_snapshot())
        assert pred.source == "heuristic"

    def test_request_without_service(self) -> None:
        assert Advisor().request(Domain.EMISSION, _emission_snapshot()) is None

    async def test_request_stores_latest(self) -> None:
        advisor = Advisor(QuickService())
        task = advisor.request(Domain.EMISSION, _emission_snapshot())
        assert task is not None
        await task
        latest = advisor.latest(Domain.EMISSION)
        assert latest is not None
        assert latest.source == "gemini"

    async def test_one_request_in_flight_per_domain(self) -> None:
        advisor = Advisor(SlowService(), timeout_secs=30.0)
        first = advisor.request(Domain.EMISSION, _emission_snapshot())
        assert first is not None
        assert advisor.request(Domain.EMISSION, _emission_snapshot()) is None
        await advisor.close()
        assert first.cancelled()
        assert advisor.latest(Domain.EMISSION) is None
