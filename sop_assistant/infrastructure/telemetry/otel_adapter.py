"""OpenTelemetry adapter for answer-pipeline metrics.

Why: Answer volume, confidence distribution and degraded answers are the
signals that show when the model backend or the index needs attention.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from importlib import import_module
from typing import Any

logger = logging.getLogger(__name__)


@dataclass
class OtelConfig:
    """Configuration for OpenTelemetry."""

    service_name: str = "sop-assistant"
    otlp_endpoint: str | None = None  # e.g., "http://localhost:4317"
    environment: str = "production"
    enable_console: bool = False


class OpenTelemetryAdapter:
    """Counters via incr(), histograms via observe().

    Instruments are created lazily on first use. Without opentelemetry-sdk
    installed every call is a no-op.
    """

    def __init__(self, cfg: OtelConfig) -> None:
        self._cfg = cfg
        self._meter: Any | None = None
        self._counters: dict[str, Any] = {}
        self._histograms: dict[str, Any] = {}
        self._init_otel()

    def _readers(self, otel_export: Any) -> list[Any]:
        readers = []
        if self._cfg.otlp_endpoint:
            try:
                otlp = import_module("opentelemetry.exporter.otlp.proto.grpc.metric_exporter")
            except ImportError:
                logger.warning("OTLP endpoint set but the OTLP exporter is not installed")
            else:
                exporter = otlp.OTLPMetricExporter(endpoint=self._cfg.otlp_endpoint)
                readers.append(otel_export.PeriodicExportingMetricReader(exporter))
        if self._cfg.enable_console:
            exporter = otel_export.ConsoleMetricExporter()
            readers.append(otel_export.PeriodicExportingMetricReader(exporter))
        return readers

    def _init_otel(self) -> None:
        try:
            otel_sdk = import_module("opentelemetry.sdk.metrics")
            otel_export = import_module("opentelemetry.sdk.metrics.export")
            otel_metrics = import_module("opentelemetry.metrics")
            otel_resources = import_module("opentelemetry.sdk.resources")
        except ImportError:
            logger.info("opentelemetry-sdk not installed; metrics disabled")
            return

        resource = otel_resources.Resource.create(
            {
                "service.name": self._cfg.service_name,
                "deployment.environment": self._cfg.environment,
            }
        )
        provider = otel_sdk.MeterProvider(
            resource=resource, metric_readers=self._readers(otel_export)
        )
        otel_metrics.set_meter_provider(provider)
        self._meter = otel_metrics.get_meter(__name__)

    @property
    def enabled(self) -> bool:
        return self._meter is not None

    def incr(self, name: str, tags: dict[str, Any] | None = None) -> None:
        """incr("sop.answers.total", {"level": "high"})"""
        if self._meter is None:
            return
        try:
            if name not in self._counters:
                self._counters[name] = self._meter.create_counter(
                    name=name, description=f"Counter for {name}"
                )
            self._counters[name].add(1, attributes=tags or {})
        except Exception as ex:  # noqa: BLE001
            # metrics must never break the answer path
            logger.debug("Metric %s not recorded: %s", name, ex)

    def observe(self, name: str, value: float, tags: dict[str, Any] | None = None) -> None:
        """observe("sop.answer.confidence", 0.82)"""
        if self._meter is None:
            return
        try:
            if name not in self._histograms:
                self._histograms[name] = self._meter.create_histogram(
                    name=name, description=f"Histogram for {name}"
                )
            self._histograms[name].record(value, attributes=tags or {})
        except Exception as ex:  # noqa: BLE001
            logger.debug("Metric %s not recorded: %s", name, ex)
