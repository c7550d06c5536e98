"""Advisory predictions — Gemini client, canned heuristic, and the fallback wrapper."""

from __future__ import annotations

import abc
import asyncio
import json
import re
from typing import Any

import httpx
import structlog
from pydantic import BaseModel, Field

from plantguard.core.config import PredictionConfig
from plantguard.core.types import (
    AshReadings,
    Domain,
    EquipmentReadings,
    LoadReadings,
    Snapshot,
)
from plantguard.evaluation.formatters import parameter_label
from plantguard.prediction.exceptions import PredictionError

logger = structlog.get_logger(__name__)

_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")


class Prediction(BaseModel):
    """Advice attached to an alert."""

    summary: str = ""
    recommended_actions: list[str] = Field(default_factory=list)
    source: str = "heuristic"
    raw: dict[str, Any] = Field(default_factory=dict)

    def as_text(self) -> str:
        parts = [self.summary] if self.summary else []
        if self.recommended_actions:
            parts.append("Actions: " + "; ".join(self.recommended_actions))
        return ". ".join(parts)


class PredictionService(abc.ABC):
    """Produces advice for a domain snapshot."""

    @abc.abstractmethod
    async def predict(self, domain: Domain, snapshot: Snapshot) -> Prediction:
        """Return advice, or raise PredictionError."""

    async def close(self) -> None:
        return None


# ── Heuristic ───────────────────────────────────────────────────

_ACTIONS: dict[str, str] = {
    "sox": "Check flue gas desulphurisation unit",
    "nox": "Tune combustion air and check SCR dosing",
    "co2": "Review heat rate and coal quality",
    "pm": "Inspect electrostatic precipitator fields",
    "co": "Check combustion completeness and burner tilt",
    "temperature": "Verify cooling systems",
    "vibration": "Monitor vibration levels and check bearing alignment",
    "pressure": "Inspect pressure relief valves",
    "efficiency": "Schedule routine inspection",
    "load_pct": "Arrange standby generation and review load shedding plan",
    "fly_ash_pct": "Dispatch fly ash to cement and brick users",
    "bottom_ash_pct": "Schedule bottom ash evacuation",
}


class HeuristicPredictor(PredictionService):
    """Deterministic canned advice derived from the snapshot's raised violations."""

    async def predict(self, domain: Domain, snapshot: Snapshot) -> Prediction:
        return self.advise(domain, snapshot)

    def advise(self, domain: Domain, snapshot: Snapshot) -> Prediction:
        raised = [v for v in snapshot.violations if v.snapshot_id == snapshot.id]
        if not raised:
            return Prediction(summary=f"{domain.value.title()} parameters within limits")

        worst = max(v.severity for v in raised)
        labels = ", ".join(parameter_label(v.parameter) for v in raised)
        actions: list[str] = []
        for v in raised:
            action = _ACTIONS.get(v.parameter)
            if action and action not in actions:
                actions.append(action)
        return Prediction(
            summary=f"{worst.name.title()} risk: {labels} out of range",
            recommended_actions=actions,
        )


# ── Gemini ──────────────────────────────────────────────────────


def build_prompt(domain: Domain, snapshot: Snapshot) -> str:
    """Domain-specific prompt asking for a JSON reply."""
    readings = snapshot.readings
    lines = [
        f"{parameter_label(name)}: {r.value:g} {r.unit}".rstrip()
        + (f" (limit {r.threshold:g})" if r.threshold is not None else "")
        for name, r in snapshot.parameters().items()
    ]
    data = "\n".join(lines)

    if isinstance(readings, EquipmentReadings):
        return (
            "As a thermal power plant maintenance expert, analyze this equipment data.\n"
            f"Equipment: {readings.equipment_name} ({readings.equipment_type})\n{data}\n"
            'Reply with JSON: {"riskLevel": "Low/Medium/High", "maintenanceDue": "YYYY-MM-DD", '
            '"recommendedActions": ["..."], "confidenceScore": 0.85}'
        )
    if isinstance(readings, LoadReadings):
        return (
            "As a power grid analyst, assess this demand data.\n"
            f"Demand: {readings.demand_mw} MW, Generation: {readings.generation_mw} MW, "
            f"Capacity: {readings.capacity_mw} MW\n"
            'Reply with JSON: {"peakHour": "HH:00", "peakLoad": 0, '
            '"recommendedActions": ["..."], "confidence": 0.9}'
        )
    if isinstance(readings, AshReadings):
        return (
            "As an ash management expert, analyze this thermal power plant ash data.\n"
            f"{data}\n"
            'Reply with JSON: {"disposalNeeded": true, "daysToCapacity": 0, '
            '"recommendedUtilization": ["cement", "bricks"], "marketDemand": "High/Medium/Low"}'
        )
    return (
        "As a power plant environmental compliance expert, analyze these stack emissions.\n"
        f"{data}\n"
        'Reply with JSON: {"summary": "...", "recommendedActions": ["..."]}'
    )


def parse_prediction(domain: Domain, text: str) -> Prediction:
    """Extract the first JSON object from a model reply."""
    match = _JSON_OBJECT.search(text or "")
    if match is None:
        raise PredictionError("No JSON object in prediction reply")
    try:
        data = json.loads(match.group(0))
    except ValueError as exc:
        raise PredictionError("Prediction reply is not valid JSON") from exc
    if not isinstance(data, dict):
        raise PredictionError("Prediction reply is not a JSON object")

    actions = data.get("recommendedActions") or data.get("recommendedUtilization") or []
    if domain == Domain.EQUIPMENT:
        summary = f"Risk level {data.get('riskLevel', 'Unknown')}"
        if data.get("maintenanceDue"):
            summary += f", maintenance due {data['maintenanceDue']}"
    elif domain == Domain.LOAD:
        summary = f"Peak load {data.get('peakLoad', '?')} MW at {data.get('peakHour', '?')}"
    elif domain == Domain.ASH:
        summary = f"{data.get('daysToCapacity', '?')} days to storage capacity"
        if data.get("disposalNeeded"):
            summary += ", disposal needed"
    else:
        summary = str(data.get("summary", ""))

    return Prediction(
        summary=summary,
        recommended_actions=[str(a) for a in actions],
        source="gemini",
        raw=data,
    )


class GeminiPredictionService(PredictionService):
    """Calls the Gemini ``generateContent`` REST endpoint."""

    def __init__(self, config: PredictionConfig, client: httpx.AsyncClient | None = None) -> None:
        self._api_key = config.api_key.get_secret_value()
        self._url = f"{config.base_url.rstrip('/')}/{config.model}:generateContent"
        self._timeout_secs = config.timeout_secs
        self._http = client

    def _get_client(self) -> httpx.AsyncClient:
        if self._http is None or self._http.is_closed:
            self._http = httpx.AsyncClient(timeout=httpx.Timeout(self._timeout_secs))
        return self._http

    async def predict(self, domain: Domain, snapshot: Snapshot) -> Prediction:
        payload = {"contents": [{"parts": [{"text": build_prompt(domain, snapshot)}]}]}
        try:
            response = await self._get_client().post(
                self._url, params={"key": self._api_key}, json=payload
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise PredictionError(
                f"Prediction API returned {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise PredictionError(f"Prediction API request failed: {exc}") from exc

        try:
            body = response.json()
            text = body["candidates"][0]["content"]["parts"][0]["text"]
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            raise PredictionError("Unexpected prediction API response shape") from exc

        return parse_prediction(domain, text)

    async def close(self) -> None:
        if self._http is not None:
            await self._http.aclose()
            self._http = None


# ── Advisor ─────────────────────────────────────────────────────


class Advisor:
    """Advice for alerts without putting the prediction service on the dispatch path.

    ``immediate`` returns heuristic advice synchronously, for the alert text.
    ``request`` starts a remote prediction in the background (one in flight
    per domain); when it lands it is logged and kept as ``latest(domain)``.
    ``advise`` awaits the service under a timeout with heuristic fallback and
    never raises.
    """

    def __init__(
        self,
        service: PredictionService | None = None,
        timeout_secs: float = 10.0,
        fallback: HeuristicPredictor | None = None,
    ) -> None:
        self._service = service
        self._timeout_secs = timeout_secs
        self._fallback = fallback or HeuristicPredictor()
        self._latest: dict[Domain, Prediction] = {}
        self._pending: dict[Domain, asyncio.Task[Prediction]] = {}

    def immediate(self, domain: Domain, snapshot: Snapshot) -> Prediction:
        return self._fallback.advise(domain, snapshot)

    def latest(self, domain: Domain) -> Prediction | None:
        """Most recent background prediction for *domain*, if any."""
        return self._latest.get(domain)

    def request(self, domain: Domain, snapshot: Snapshot) -> asyncio.Task[Prediction] | None:
        """Schedule a background prediction; returns the task, or None if not started."""
        if self._service is None:
            return None
        pending = self._pending.get(domain)
        if pending is not None and not pending.done():
            logger.debug("prediction_in_flight", domain=domain)
            return None
        task = asyncio.create_task(self._refresh(domain, snapshot.model_copy(deep=True)))
        self._pending[domain] = task
        return task

    async def _refresh(self, domain: Domain, snapshot: Snapshot) -> Prediction:
        prediction = await self.advise(domain, snapshot)
        self._latest[domain] = prediction
        logger.info(
            "prediction_received",
            domain=domain,
            snapshot_id=snapshot.id,
            source=prediction.source,
            advice=prediction.as_text(),
        )
        return prediction

    async def advise(self, domain: Domain, snapshot: Snapshot) -> Prediction:
        if self._service is None:
            return self._fallback.advise(domain, snapshot)
        try:
            return await asyncio.wait_for(
                self._service.predict(domain, snapshot),
                timeout=self._timeout_secs,
            )
        except Exception as exc:
            logger.warning(
                "prediction_fallback",
                domain=domain,
                error=f"{type(exc).__name__}: {exc}",
            )
            return self._fallback.advise(domain, snapshot)

    async def close(self) -> None:
        pending = [t for t in self._pending.values() if not t.done()]
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
        self._pending.clear()
        if self._service is not None:
            await self._service.close()


def create_advisor(config: PredictionConfig) -> Advisor:
    if config.enabled and config.api_key.get_secret_value():
        return Advisor(GeminiPredictionService(config), timeout_secs=config.timeout_secs)
    return Advisor(timeout_secs=config.timeout_secs)
