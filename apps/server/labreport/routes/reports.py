"""Report generation endpoints: direct rendering and model-assisted extraction."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from fastapi import APIRouter, HTTPException

from ..api_models import AnalysisResponse, HtmlContentRequest, ReportRequest, ReportResponse
from ..extraction import ExtractionError, ExtractionParseError
from ..report import ReportData, ReportGenerationError
from ..report.pdf_builder import GeneratedReport

if TYPE_CHECKING:
    from ..app import RuntimeState

LOGGER = logging.getLogger(__name__)


def _response(
    generated: GeneratedReport, report: ReportData, msg: str | None = None
) -> ReportResponse:
    return ReportResponse(
        pdfBase64=generated.pdf_base64,
        reportData=report.to_dict(),
        fileName=generated.path.name if generated.path is not None else None,
        msg=msg,
    )


def create_report_routes(state: RuntimeState) -> APIRouter:
    router = APIRouter()

    async def _generate(report: ReportData, variant: str | None) -> GeneratedReport:
        try:
            return await asyncio.to_thread(
                state.report_generator.generate, report, variant=variant
            )
        except ReportGenerationError as exc:
            # already logged with traceback where it was raised
            raise HTTPException(status_code=500, detail=str(exc)) from exc
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc

    @router.post("/api/reports", response_model=ReportResponse)
    async def create_report(req: ReportRequest) -> ReportResponse:
        report = ReportData.from_dict(req.reportData, graph_specs=req.graphSpecs)
        generated = await _generate(report, req.variant)
        return _response(generated, report)

    @router.post("/api/imageparser", response_model=ReportResponse)
    async def image_parser(req: HtmlContentRequest) -> ReportResponse:
        try:
            payload, reply = await asyncio.to_thread(
                state.extraction_client.extract_payload, req.htmlContent
            )
        except ExtractionParseError as exc:
            raise HTTPException(status_code=502, detail="Failed to parse analysis results") from exc
        except ExtractionError as exc:
            raise HTTPException(status_code=502, detail=str(exc)) from exc
        report = payload.to_report_data()
        generated = await _generate(report, req.variant)
        return _response(generated, report, msg=reply)

    @router.post("/api/excelAnalysis", response_model=AnalysisResponse)
    async def excel_analysis(req: HtmlContentRequest) -> AnalysisResponse:
        try:
            msg = await asyncio.to_thread(state.extraction_client.analyze_html, req.htmlContent)
        except ExtractionError as exc:
            raise HTTPException(status_code=502, detail=str(exc)) from exc
        return AnalysisResponse(msg=msg)

    return router
