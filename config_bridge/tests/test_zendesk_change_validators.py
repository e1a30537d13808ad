"""Tests for the Zendesk change validators."""

import logging

import pytest

from config_bridge.adapters.zendesk import create_zendesk_change_validator
from config_bridge.adapters.zendesk.change_validators import (
    custom_status_category_validator,
    custom_status_unique_agent_label_validator,
    translation_for_default_locale_validator,
)
from config_bridge.adapters.zendesk.constants import ZENDESK
from config_bridge.core.elements import (
    ADDITION,
    MODIFICATION,
    REMOVAL,
    Change,
    ElemID,
    InstanceElement,
    ObjectType,
    ReferenceExpression,
)
from config_bridge.core.elements_source import InMemoryElementsSource

STATUS_TYPE = ObjectType(ElemID(ZENDESK, "custom_status"))
SECTION_TYPE = ObjectType(ElemID(ZENDESK, "section"))
SECTION_TRANSLATION_TYPE = ObjectType(ElemID(ZENDESK, "section_translation"))
LOCALE_TYPE = ObjectType(ElemID(ZENDESK, "guide_language_settings"))


def _change(instance, action):
    if action == ADDITION:
        return Change(action, after=instance)
    if action == REMOVAL:
        return Change(action, before=instance)
    return Change(action, before=instance, after=instance)


def _status(name, category="open", label=None):
    value = {"status_category": category}
    if label is not None:
        value["raw_agent_label"] = label
    return InstanceElement(name, STATUS_TYPE, value)


class TestCustomStatusCategory:
    @pytest.mark.asyncio
    async def test_valid_categories_pass(self):
        changes = [
            _change(_status(f"s_{cat}", cat), ADDITION)
            for cat in ("open", "pending", "hold", "solved")
        ]
        assert await custom_status_category_validator(changes) == []

    @pytest.mark.asyncio
    async def test_invalid_category(self):
        instance = _status("bad", "new")
        errors = await custom_status_category_validator([_change(instance, MODIFICATION)])
        assert len(errors) == 1
        assert errors[0].elem_id == instance.elem_id
        assert errors[0].severity == "Error"
        assert "must be one of these: open, pending, hold, and solved" in errors[0].message
        assert "bad" in errors[0].detailed_message

    @pytest.mark.asyncio
    async def test_missing_category_is_invalid(self):
        instance = InstanceElement("empty", STATUS_TYPE, {})
        errors = await custom_status_category_validator([_change(instance, ADDITION)])
        assert len(errors) == 1

    @pytest.mark.asyncio
    async def test_other_types_ignored(self):
        instance = InstanceElement("sec", SECTION_TYPE, {"status_category": "nope"})
        assert await custom_status_category_validator([_change(instance, ADDITION)]) == []


class TestCustomStatusUniqueAgentLabel:
    @pytest.mark.asyncio
    async def test_duplicate_label(self):
        existing = _status("existing", label="Waiting")
        new = _status("new", label="Waiting")
        source = InMemoryElementsSource([existing, new])
        errors = await custom_status_unique_agent_label_validator(
            [_change(new, ADDITION)], source
        )
        assert [e.elem_id for e in errors] == [new.elem_id]
        assert "already used by another status" in errors[0].message

    @pytest.mark.asyncio
    async def test_unique_labels_pass(self):
        a = _status("a", label="One")
        b = _status("b", label="Two")
        source = InMemoryElementsSource([a, b])
        errors = await custom_status_unique_agent_label_validator(
            [_change(a, ADDITION), _change(b, ADDITION)], source
        )
        assert errors == []

    @pytest.mark.asyncio
    async def test_own_label_is_not_a_collision(self):
        a = _status("a", label="One")
        errors = await custom_status_unique_agent_label_validator(
            [_change(a, MODIFICATION)], InMemoryElementsSource([a])
        )
        assert errors == []

    @pytest.mark.asyncio
    async def test_missing_labels_never_collide(self):
        a = _status("a")
        b = _status("b")
        errors = await custom_status_unique_agent_label_validator(
            [_change(a, ADDITION)], InMemoryElementsSource([a, b])
        )
        assert errors == []

    @pytest.mark.asyncio
    async def test_no_elements_source(self, caplog):
        with caplog.at_level(logging.ERROR, logger="config_bridge.zendesk.change_validators"):
            errors = await custom_status_unique_agent_label_validator(
                [_change(_status("a", label="x"), ADDITION)]
            )
        assert errors == []
        assert "no element source" in caplog.text


def _locale(name, locale_id):
    return InstanceElement(name, LOCALE_TYPE, {"id": locale_id, "locale": name})


def _section(name, source_locale, translations):
    return InstanceElement(
        name,
        SECTION_TYPE,
        {"source_locale": source_locale, "translations": translations},
    )


def _translation(name, locale):
    return InstanceElement(
        name, SECTION_TRANSLATION_TYPE, {"locale": locale, "body": "text"}
    )


def _ref(instance):
    return ReferenceExpression(instance.elem_id, instance)


class TestTranslationForDefaultLocale:
    @pytest.mark.asyncio
    async def test_missing_default_translation(self):
        en = _locale("en_us", "en-us")
        he = _locale("he", "he")
        section = _section("sec", _ref(en), [_ref(_translation("sec_he", _ref(he)))])
        errors = await translation_for_default_locale_validator([_change(section, ADDITION)])
        assert len(errors) == 1
        assert errors[0].elem_id == section.elem_id
        assert errors[0].message == (
            "Instance zendesk.section.instance.sec does not have a translation "
            "for the source locale"
        )
        assert errors[0].detailed_message.endswith("source locale en-us")

    @pytest.mark.asyncio
    async def test_default_translation_present(self):
        en = _locale("en_us", "en-us")
        section = _section("sec", _ref(en), [_ref(_translation("sec_en", _ref(en)))])
        assert await translation_for_default_locale_validator(
            [_change(section, MODIFICATION)]
        ) == []

    @pytest.mark.asyncio
    async def test_plain_locale_string_on_translation(self):
        en = _locale("en_us", "en-us")
        section = _section("sec", _ref(en), [_ref(_translation("sec_en", "en-us"))])
        assert await translation_for_default_locale_validator(
            [_change(section, ADDITION)]
        ) == []

    @pytest.mark.asyncio
    async def test_source_locale_not_a_reference_is_skipped(self):
        section = _section("sec", "en-us", [])
        assert await translation_for_default_locale_validator(
            [_change(section, ADDITION)]
        ) == []

    @pytest.mark.asyncio
    async def test_removals_ignored(self):
        en = _locale("en_us", "en-us")
        section = _section("sec", _ref(en), [])
        assert await translation_for_default_locale_validator(
            [_change(section, REMOVAL)]
        ) == []


class TestCombinedValidator:
    @pytest.mark.asyncio
    async def test_runs_all_validators(self):
        a = _status("a", "wrong", label="dup")
        b = _status("b", label="dup")
        validator = create_zendesk_change_validator()
        errors = await validator(
            [_change(a, ADDITION)], InMemoryElementsSource([a, b])
        )
        assert len(errors) == 2

    @pytest.mark.asyncio
    async def test_disabled_validator_skipped(self):
        a = _status("a", "wrong")
        validator = create_zendesk_change_validator(["customStatusCategory"])
        assert await validator([Change(ADDITION, after=a)], InMemoryElementsSource([a])) == []

    def test_unknown_disabled_name_raises(self):
        with pytest.raises(ValueError):
            create_zendesk_change_validator(["noSuchValidator"])
