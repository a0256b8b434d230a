"""Collaboration workflow graph."""

from codeduo.infrastructure.workflow.graph import build_collaboration_graph, compile_collaboration_graph

__all__ = ["build_collaboration_graph", "compile_collaboration_graph"]
