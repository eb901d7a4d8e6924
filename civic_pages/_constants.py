"""Common literal values used across civic_pages.

These constants keep template names, layout classes, and user-facing copy
centralized so the renderers, the route resolver, and tests import the same
values without drifting. Intended for internal use within the civic_pages
package.

Examples
--------
>>> from civic_pages import _constants
>>> _constants.LEGACY_TEMPLATES["default"]
'legacy/default.jinja'
>>> _constants.messages_for("en")["page_not_found"]
'Page not found'
"""

DEFAULT_TEMPLATE_KEY = "default"
GALLERY_TEMPLATE_KEY = "gallery"
SERVICES_TEMPLATE_KEY = "services"
POSTS_TEMPLATE_KEY = "posts"

POST_ROUTE_PREFIX = "objave"
ARCHIVE_PAGE_SEGMENT = "page"

LEGACY_TEMPLATES: dict[str, str] = {
    "about": "legacy/about.jinja",
    "contact": "legacy/contact.jinja",
    SERVICES_TEMPLATE_KEY: "legacy/services.jinja",
    "transparency": "legacy/transparency.jinja",
    GALLERY_TEMPLATE_KEY: "legacy/gallery.jinja",
    POSTS_TEMPLATE_KEY: "legacy/posts.jinja",
    DEFAULT_TEMPLATE_KEY: "legacy/default.jinja",
}

FULL_WIDTH_CLASSES = "w-full"
CONTAINED_CLASSES = "max-w-7xl mx-auto px-4 sm:px-6 lg:px-8"
SECTION_PADDING_CLASS = "py-16"
HERO_HEIGHT_CLASSES: dict[str, str] = {
    "100%": "min-h-screen",
    "75%": "min-h-[75vh]",
    "50%": "min-h-[50vh]",
    "25%": "min-h-[25vh]",
}
DEFAULT_HERO_HEIGHT_CLASS = "min-h-[60vh]"
DEFAULT_CTA_BACKGROUND = "#f3f4f6"
LOGO_MARQUEE_THRESHOLD = 8
TEAM_MAX_COLUMNS = 3

_MESSAGES: dict[str, dict[str, str]] = {
    "sr": {
        "page_not_found": "Страница није пронађена",
        "page_not_found_body": "Страница коју тражите не постоји или је уклоњена.",
        "gallery_not_found": "Галерија није пронађена",
        "gallery_not_found_body": "Галерија коју тражите не постоји или је уклоњена.",
        "service_not_found": "Услуга није пронађена",
        "service_not_found_body": "Услуга коју тражите не постоји или је уклоњена.",
        "post_not_found": "Објава није пронађена",
        "back_home": "Назад на почетну",
        "back_to_parent": "Назад",
        "no_sections": "Нема секција за приказ на овој страници.",
        "unknown_section": "Непознат тип секције",
        "broken_section": "Секцију није могуће приказати",
        "no_html": "Нема HTML садржаја за приказ.",
        "read_more": "Сазнај више",
        "send_message": "Пошаљите поруку",
        "related_posts": "Објаве",
        "views": "прегледа",
        "address": "Адреса",
        "phone": "Телефон",
        "email": "Имејл",
        "working_hours": "Радно време",
        "name": "Име и презиме",
        "subject": "Наслов",
        "message": "Порука",
        "responsible_department": "Надлежно одељење",
        "duration": "Рок",
        "price": "Цена",
        "online": "Онлајн",
        "requires_appointment": "Потребно заказивање",
        "required_documents": "Потребна документација",
        "galleries": "Галерије",
        "no_galleries": "Тренутно нема објављених галерија.",
        "services": "Услуге",
        "previous_page": "Претходна",
        "next_page": "Следећа",
        "page_of": "Страна {page} од {total}",
    },
    "en": {
        "page_not_found": "Page not found",
        "page_not_found_body": "The page you are looking for does not exist or was removed.",
        "gallery_not_found": "Gallery not found",
        "gallery_not_found_body": "The gallery you are looking for does not exist or was removed.",
        "service_not_found": "Service not found",
        "service_not_found_body": "The service you are looking for does not exist or was removed.",
        "post_not_found": "Post not found",
        "back_home": "Back to home page",
        "back_to_parent": "Back",
        "no_sections": "No sections to display on this page.",
        "unknown_section": "Unknown section type",
        "broken_section": "This section could not be displayed",
        "no_html": "No HTML content to display.",
        "read_more": "Read more",
        "send_message": "Send message",
        "related_posts": "Posts",
        "views": "views",
        "address": "Address",
        "phone": "Phone",
        "email": "Email",
        "working_hours": "Working hours",
        "name": "Full name",
        "subject": "Subject",
        "message": "Message",
        "responsible_department": "Responsible department",
        "duration": "Processing time",
        "price": "Price",
        "online": "Online",
        "requires_appointment": "Appointment required",
        "required_documents": "Required documents",
        "galleries": "Galleries",
        "no_galleries": "There are no published galleries yet.",
        "services": "Services",
        "previous_page": "Previous",
        "next_page": "Next",
        "page_of": "Page {page} of {total}",
    },
}
DEFAULT_LANGUAGE = "sr"


def messages_for(language: str | None) -> dict[str, str]:
    """Return the user-facing copy for ``language``, falling back to Serbian."""
    return _MESSAGES.get((language or DEFAULT_LANGUAGE).lower(), _MESSAGES[DEFAULT_LANGUAGE])
