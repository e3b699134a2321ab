"""Workflows package."""

from sc_component_manager.workflows.dependency_resolver import (
    build_dependency_graph,
    resolve_install_order,
)
from sc_component_manager.workflows.models import PipelineReport
from sc_component_manager.workflows.pipeline import InstallPipeline

__all__ = [
    "InstallPipeline",
    "PipelineReport",
    "build_dependency_graph",
    "resolve_install_order",
]
