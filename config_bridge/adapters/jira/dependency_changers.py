"""
Jira dependency changers.

A project references the field contexts it is attached to, which makes
the planner deploy the contexts first.  Jira attaches a context to a
project from the context side though, so the project must exist before
the context is deployed; the edge is flipped.
"""

from __future__ import annotations

from config_bridge.core.dependency import (
    ADD,
    REMOVE,
    ChangeId,
    DependencyChange,
    dependency_change,
)
from config_bridge.core.elements import (
    Change,
    ReferenceExpression,
    get_change_data,
    is_instance_change,
    make_array,
)
from config_bridge.adapters.jira.constants import (
    FIELD_CONTEXT_TYPE_NAME,
    PROJECT_CONTEXTS_FIELD,
    PROJECT_TYPE,
)


def _keys_of_type(changes: dict[ChangeId, Change], type_name: str) -> list[ChangeId]:
    return [
        key
        for key, change in changes.items()
        if is_instance_change(change) and get_change_data(change).elem_id.type_name == type_name
    ]


async def project_contexts_dependency_changer(
    changes: dict[ChangeId, Change],
    deps: dict[ChangeId, set[ChangeId]],
) -> list[DependencyChange]:
    context_key_by_name = {
        get_change_data(changes[key]).elem_id.get_full_name(): key
        for key in _keys_of_type(changes, FIELD_CONTEXT_TYPE_NAME)
    }

    dependency_changes: list[DependencyChange] = []
    for project_key in _keys_of_type(changes, PROJECT_TYPE):
        project = get_change_data(changes[project_key])
        for ref in make_array(project.value.get(PROJECT_CONTEXTS_FIELD)):
            if not isinstance(ref, ReferenceExpression):
                continue
            context_key = context_key_by_name.get(ref.elem_id.get_full_name())
            if context_key is None or context_key not in deps.get(project_key, set()):
                continue
            dependency_changes.append(dependency_change(REMOVE, project_key, context_key))
            dependency_changes.append(dependency_change(ADD, context_key, project_key))
    return dependency_changes
