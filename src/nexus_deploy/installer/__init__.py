"""Provisioning stages for the Nexus CLI."""

from .builder import build_stage
from .dependencies import rust_stage, system_packages_stage
from .pipeline import DeployContext, DeployError, Pipeline, StageFailed, StageResult, StageStatus
from .preflight import confirm_stage, preflight_stage
from .report import report_stage
from .service import service_stage
from .tuning import tuning_stage

STAGES = [
    ("preflight", preflight_stage),
    ("confirm", confirm_stage),
    ("dependencies", system_packages_stage),
    ("rust", rust_stage),
    ("tuning", tuning_stage),
    ("build", build_stage),
    ("service", service_stage),
    ("report", report_stage),
]


def default_pipeline() -> Pipeline:
    return Pipeline(STAGES)


__all__ = [
    "DeployContext",
    "DeployError",
    "Pipeline",
    "STAGES",
    "StageFailed",
    "StageResult",
    "StageStatus",
    "default_pipeline",
]
