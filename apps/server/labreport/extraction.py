"""Language-model extraction of structured report data from HTML test tables.

The model is asked for a JSON object, but replies are still scanned
tolerantly: a fenced ```json block wins, otherwise the outermost ``{...}``
span is used.  The parsed object is validated with a pydantic model whose
sections default to empty, so a reply with missing sections still yields a
report.
"""

from __future__ import annotations

import json
import logging
import os
import re
import threading
from typing import Any

import openai
from openai import OpenAI
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .config import ExtractionConfig
from .report.report_data import ReportData

LOGGER = logging.getLogger(__name__)

_FENCED_JSON_RE = re.compile(r"```json\s*\n(.*?)\n?```", re.DOTALL | re.IGNORECASE)

EXTRACTION_SYSTEM_PROMPT = """\
You are a materials science expert specializing in analyzing test data. \
Analyze the provided HTML table data from a materials test and extract \
structured information.

Return a JSON object with this structure:
{
  "testInfo": {"<field>": "<string or number>", ...},
  "analyzedData": {"<field>": "<string or number>", ...},
  "calculatedProperties": {"<property>": "<string or number>", ...},
  "graphData": [
    {
      "title": "Graph title, e.g. Stress-Strain Curve",
      "type": "line | bar | scatter | pie",
      "xAxisLabel": "X-axis label",
      "yAxisLabel": "Y-axis label",
      "beginAtZero": true,
      "labels": ["x1", "x2"],
      "datasets": [
        {"label": "Dataset label", "data": [1.0, 2.0],
         "borderColor": "rgba(54, 162, 235, 1)",
         "backgroundColor": "rgba(54, 162, 235, 0.2)"}
      ]
    }
  ],
  "analysis": "Very brief analysis of the results (50-100 words maximum)"
}

Rules:
1. Extract ALL test information fields found in the data.
2. Values in testInfo and calculatedProperties MUST be simple strings or \
numbers, never objects or arrays. Put units inside the string, e.g. \
"youngModulus": "210.5 GPa".
3. Include every graph that helps visualise the results.
4. Keep the analysis short enough for a single-page report.
"""

ANALYSIS_SYSTEM_PROMPT = """\
Analyze the supplied HTML material test data. Produce the complete HTML of a \
test report laid out as an Excel-style grid, including both the values in \
the data and the values derived from them with the standard formulae for \
this test.
"""


class ExtractionError(RuntimeError):
    """The extraction service could not be reached or returned nothing usable."""


class ExtractionParseError(ExtractionError, ValueError):
    """The model reply held no parseable report JSON."""


class ExtractionPayload(BaseModel):
    model_config = ConfigDict(extra="allow")

    testInfo: dict[str, Any] = Field(default_factory=dict)
    analyzedData: dict[str, Any] = Field(default_factory=dict)
    calculatedProperties: dict[str, Any] = Field(default_factory=dict)
    graphData: list[dict[str, Any]] = Field(default_factory=list)
    analysis: str | None = None

    @field_validator("testInfo", "analyzedData", "calculatedProperties", mode="before")
    @classmethod
    def _object_or_empty(cls, value: Any) -> Any:
        return value if isinstance(value, dict) else {}

    @field_validator("graphData", mode="before")
    @classmethod
    def _graph_list(cls, value: Any) -> Any:
        if not isinstance(value, list):
            return []
        return [item for item in value if isinstance(item, dict)]

    @field_validator("analysis", mode="before")
    @classmethod
    def _analysis_text(cls, value: Any) -> Any:
        if value is None or isinstance(value, str):
            return value
        return json.dumps(value, ensure_ascii=False, default=str)

    def to_report_data(self) -> ReportData:
        return ReportData.from_dict(self.model_dump())


def locate_json_payload(text: str) -> str:
    """Return the JSON text embedded in a model reply."""
    match = _FENCED_JSON_RE.search(text)
    if match:
        return match.group(1)
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end <= start:
        raise ExtractionParseError("Could not extract JSON from the model response")
    return text[start : end + 1]


def parse_extraction_payload(text: str) -> ExtractionPayload:
    raw = locate_json_payload(text)
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ExtractionParseError("Failed to parse analysis results") from exc
    if not isinstance(data, dict):
        raise ExtractionParseError("Analysis results are not a JSON object")
    try:
        return ExtractionPayload.model_validate(data)
    except ValidationError as exc:
        raise ExtractionParseError("Analysis results have an unexpected shape") from exc


class ExtractionClient:
    """Thin wrapper around an OpenAI-compatible chat completions endpoint."""

    def __init__(self, cfg: ExtractionConfig, client: OpenAI | None = None) -> None:
        self._cfg = cfg
        self._client = client
        self._client_lock = threading.Lock()

    def _get_client(self) -> OpenAI:
        with self._client_lock:
            if self._client is None:
                api_key = os.environ.get(self._cfg.api_key_env, "").strip()
                if not api_key:
                    raise ExtractionError(
                        f"Extraction service is not configured: set {self._cfg.api_key_env}"
                    )
                self._client = OpenAI(api_key=api_key, base_url=self._cfg.base_url)
            return self._client

    def _complete(self, system: str, user: str, *, json_mode: bool) -> str:
        kwargs: dict[str, Any] = {
            "model": self._cfg.model,
            "max_tokens": self._cfg.max_tokens,
            "temperature": self._cfg.temperature,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
        }
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}
        try:
            response = self._get_client().chat.completions.create(**kwargs)
        except openai.OpenAIError as exc:
            LOGGER.warning("Extraction request failed: %s", exc)
            raise ExtractionError("Extraction service request failed") from exc
        if not response.choices:
            raise ExtractionError("Extraction service returned no choices")
        return response.choices[0].message.content or ""

    def extract_payload(self, html: str) -> tuple[ExtractionPayload, str]:
        """Extract structured data; returns the payload and the raw reply text."""
        text = self._complete(
            EXTRACTION_SYSTEM_PROMPT,
            f"Please analyze this material test data and extract structured information: {html}",
            json_mode=True,
        )
        try:
            payload = parse_extraction_payload(text)
        except ExtractionParseError:
            LOGGER.warning("Unparseable extraction reply (%d chars)", len(text), exc_info=True)
            raise
        LOGGER.info(
            "Extracted report fields test_info=%d properties=%d graphs=%d",
            len(payload.testInfo),
            len(payload.calculatedProperties),
            len(payload.graphData),
        )
        return payload, text

    def extract(self, html: str) -> ReportData:
        payload, _ = self.extract_payload(html)
        return payload.to_report_data()

    def analyze_html(self, html: str) -> str:
        """Free-form report draft for the supplied table, as returned by the model."""
        return self._complete(ANALYSIS_SYSTEM_PROMPT, html, json_mode=False)
