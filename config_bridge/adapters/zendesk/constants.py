ZENDESK = "zendesk"
GUIDE = "guide"

BRAND_TYPE_NAME = "brand"
CUSTOM_STATUS_TYPE_NAME = "custom_status"

OPEN_CATEGORY = "open"
PENDING_CATEGORY = "pending"
HOLD_CATEGORY = "hold"
SOLVED_CATEGORY = "solved"

ARTICLE_TYPE_NAME = "article"
ARTICLE_TRANSLATION_TYPE_NAME = "article_translation"
SECTION_TYPE_NAME = "section"
SECTION_TRANSLATION_TYPE_NAME = "section_translation"
CATEGORY_TYPE_NAME = "category"
CATEGORY_TRANSLATION_TYPE_NAME = "category_translation"
GUIDE_SETTINGS_TYPE_NAME = "guide_settings"
GUIDE_LANGUAGE_SETTINGS_TYPE_NAME = "guide_language_settings"
USER_SEGMENT_TYPE_NAME = "user_segment"
PERMISSION_GROUP_TYPE_NAME = "permission_group"

CATEGORIES_ORDER = "category_order"
SECTIONS_ORDER = "section_order"
ARTICLES_ORDER = "article_order"
