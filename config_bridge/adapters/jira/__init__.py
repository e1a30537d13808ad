"""Jira adapter: client and dependency changers."""

from config_bridge.adapters.jira.client import JiraClient
from config_bridge.adapters.jira.dependency_changers import project_contexts_dependency_changer

DEPENDENCY_CHANGERS = [project_contexts_dependency_changer]

__all__ = ["JiraClient", "project_contexts_dependency_changer", "DEPENDENCY_CHANGERS"]
