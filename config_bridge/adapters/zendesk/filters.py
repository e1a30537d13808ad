"""
Zendesk fetch filters.

guide_arrange_paths lays out Guide instances in a folder hierarchy that
mirrors the Help Center tree:

    zendesk/Records/guide/brands/<brand>/categories/<category>/
        sections/<section>/articles/<article>/translations/...

Instances whose brand or parent cannot be resolved land under
``guide/unsorted``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from config_bridge.core.elements import (
    RECORDS_PATH,
    Element,
    InstanceElement,
    ReferenceExpression,
    get_parent,
    is_instance_element,
    path_nacl_case,
)
from config_bridge.core.elements_source import ElementsSource
from config_bridge.core.filter import Filter, FilterCreator
from config_bridge.adapters.zendesk.client import ZendeskClient
from config_bridge.adapters.zendesk.constants import (
    ARTICLE_TRANSLATION_TYPE_NAME,
    ARTICLE_TYPE_NAME,
    ARTICLES_ORDER,
    BRAND_TYPE_NAME,
    CATEGORIES_ORDER,
    CATEGORY_TRANSLATION_TYPE_NAME,
    CATEGORY_TYPE_NAME,
    GUIDE,
    GUIDE_LANGUAGE_SETTINGS_TYPE_NAME,
    GUIDE_SETTINGS_TYPE_NAME,
    PERMISSION_GROUP_TYPE_NAME,
    SECTION_TRANSLATION_TYPE_NAME,
    SECTION_TYPE_NAME,
    SECTIONS_ORDER,
    USER_SEGMENT_TYPE_NAME,
    ZENDESK,
)

logger = logging.getLogger("config_bridge.zendesk.filters")


@dataclass
class FilterOpts:
    client: ZendeskClient | None = None
    elements_source: ElementsSource | None = None


UNSORTED = "unsorted"
GUIDE_PATH = [ZENDESK, RECORDS_PATH, GUIDE]

FIRST_LEVEL_TYPES = [USER_SEGMENT_TYPE_NAME, PERMISSION_GROUP_TYPE_NAME]
BRAND_SECOND_LEVEL = [
    CATEGORY_TYPE_NAME,
    GUIDE_SETTINGS_TYPE_NAME,
    GUIDE_LANGUAGE_SETTINGS_TYPE_NAME,
    CATEGORIES_ORDER,
]
PARENTS = [CATEGORY_TYPE_NAME, SECTION_TYPE_NAME, ARTICLE_TYPE_NAME]
TRANSLATIONS = [
    CATEGORY_TRANSLATION_TYPE_NAME,
    SECTION_TRANSLATION_TYPE_NAME,
    ARTICLE_TRANSLATION_TYPE_NAME,
]
OTHER_TYPES = [*TRANSLATIONS, SECTIONS_ORDER, ARTICLES_ORDER]

GUIDE_ELEMENT_DIRECTORY: dict[str, str] = {
    ARTICLE_TRANSLATION_TYPE_NAME: "translations",
    ARTICLE_TYPE_NAME: "articles",
    CATEGORY_TYPE_NAME: "categories",
    SECTION_TYPE_NAME: "sections",
    SECTION_TRANSLATION_TYPE_NAME: "translations",
    CATEGORY_TRANSLATION_TYPE_NAME: "translations",
    GUIDE_SETTINGS_TYPE_NAME: "settings",
    USER_SEGMENT_TYPE_NAME: "user_segments",
    PERMISSION_GROUP_TYPE_NAME: "permission_groups",
    GUIDE_LANGUAGE_SETTINGS_TYPE_NAME: "language_settings",
    CATEGORIES_ORDER: "categories_order",
    SECTIONS_ORDER: "sections_order",
    ARTICLES_ORDER: "articles_order",
}


def _directory(instance: InstanceElement) -> str:
    return GUIDE_ELEMENT_DIRECTORY[instance.elem_id.type_name]


def _unsorted_path(instance: InstanceElement) -> list[str]:
    return [*GUIDE_PATH, UNSORTED, _directory(instance), path_nacl_case(instance.elem_id.name)]


def path_for_global_types(instance: InstanceElement) -> list[str]:
    """Path of an instance not related to a specific brand."""
    return [*GUIDE_PATH, _directory(instance), path_nacl_case(instance.elem_id.name)]


def path_for_brand_specific_root_elements(
    instance: InstanceElement, brand_name: str | None
) -> list[str]:
    """Path of a brand-level instance without a parent."""
    if brand_name is None:
        logger.error("brandName was not found for instance %s.", instance.elem_id.get_full_name())
        return _unsorted_path(instance)
    new_path = [
        *GUIDE_PATH,
        "brands",
        brand_name,
        _directory(instance),
        path_nacl_case(instance.elem_id.name),
    ]
    if instance.elem_id.type_name == CATEGORY_TYPE_NAME:
        # each category has a folder of its own
        new_path.append(path_nacl_case(instance.elem_id.name))
    return new_path


def path_for_other_levels(
    instance: InstanceElement,
    need_type_directory: bool,
    need_own_folder: bool,
    parent: InstanceElement | None,
) -> list[str]:
    """Path of a brand-level instance nested under a parent instance."""
    parent_path = parent.path if parent is not None else None
    if parent_path is None:
        return _unsorted_path(instance)
    new_path = list(parent_path[:-1])
    if need_type_directory:
        new_path.append(_directory(instance))
    if need_own_folder:
        new_path.append(path_nacl_case(instance.elem_id.name))
    new_path.append(path_nacl_case(instance.elem_id.name))
    return new_path


def _ref_full_name(value: Any) -> str | None:
    if isinstance(value, ReferenceExpression):
        return value.elem_id.get_full_name()
    return None


class GuideArrangePathsFilter(Filter):
    """Arrange the paths of Guide instances on fetch."""

    name = "guide_arrange_paths"

    async def on_fetch(self, elements: list[Element]) -> None:
        guide_instances = [
            elem
            for elem in elements
            if is_instance_element(elem) and elem.elem_id.type_name in GUIDE_ELEMENT_DIRECTORY
        ]
        grouped: dict[str, list[InstanceElement]] = {}
        for inst in guide_instances:
            grouped.setdefault(inst.elem_id.type_name, []).append(inst)

        parents = [
            inst
            for inst in guide_instances
            if inst.elem_id.type_name in PARENTS and inst.value.get("id") is not None
        ]
        parents_by_id = {inst.value["id"]: inst for inst in parents}
        id_by_parent_name = {inst.elem_id.get_full_name(): inst.value["id"] for inst in parents}

        def parent_by_ref(ref: Any) -> InstanceElement | None:
            name = _ref_full_name(ref)
            if name is None or name not in id_by_parent_name:
                return None
            return parents_by_id.get(id_by_parent_name[name])

        brand_name_by_full_name = {
            elem.elem_id.get_full_name(): elem.value["name"]
            for elem in elements
            if is_instance_element(elem)
            and elem.elem_id.type_name == BRAND_TYPE_NAME
            and elem.value.get("name") is not None
        }

        # user_segments and permission_groups
        for type_name in FIRST_LEVEL_TYPES:
            for instance in grouped.get(type_name, []):
                instance.path = path_for_global_types(instance)

        # category, settings, language_settings, category_order
        for type_name in BRAND_SECOND_LEVEL:
            for instance in grouped.get(type_name, []):
                brand_name = brand_name_by_full_name.get(_ref_full_name(instance.value.get("brand")))
                instance.path = path_for_brand_specific_root_elements(instance, brand_name)

        sections = grouped.get(SECTION_TYPE_NAME, [])
        category_parent = [
            s for s in sections if s.value.get("direct_parent_type") == CATEGORY_TYPE_NAME
        ]
        section_parent = [
            s for s in sections if s.value.get("direct_parent_type") != CATEGORY_TYPE_NAME
        ]

        # sections under category
        for instance in category_parent:
            instance.path = path_for_other_levels(
                instance,
                need_type_directory=True,
                need_own_folder=True,
                parent=parent_by_ref(instance.value.get("direct_parent_id")),
            )

        # sections under section, each placed after its parent section
        pending = list(section_parent)
        while pending:
            pending_ids = {id(s) for s in pending}
            ready = [
                s for s in pending
                if id(parent_by_ref(s.value.get("direct_parent_id"))) not in pending_ids
            ]
            if not ready:
                logger.warning(
                    "Found circular section parents for %s",
                    [s.elem_id.get_full_name() for s in pending],
                )
                ready = pending
            for instance in ready:
                instance.path = path_for_other_levels(
                    instance,
                    need_type_directory=False,
                    need_own_folder=True,
                    parent=parent_by_ref(instance.value.get("direct_parent_id")),
                )
            ready_ids = {id(s) for s in ready}
            pending = [s for s in pending if id(s) not in ready_ids]

        # articles
        for instance in grouped.get(ARTICLE_TYPE_NAME, []):
            instance.path = path_for_other_levels(
                instance,
                need_type_directory=True,
                need_own_folder=True,
                parent=parent_by_ref(instance.value.get("section_id")),
            )

        # others (translations, order)
        for type_name in OTHER_TYPES:
            for instance in grouped.get(type_name, []):
                try:
                    parent_id = get_parent(instance).value.get("id")
                except ValueError:
                    logger.warning(
                        "Could not find the parent of %s", instance.elem_id.get_full_name()
                    )
                    parent_id = None
                instance.path = path_for_other_levels(
                    instance,
                    need_type_directory=True,
                    need_own_folder=False,
                    parent=parents_by_id.get(parent_id),
                )


def guide_arrange_paths(opts: FilterOpts) -> Filter:
    return GuideArrangePathsFilter()


FILTER_CREATORS: list[FilterCreator] = [guide_arrange_paths]
