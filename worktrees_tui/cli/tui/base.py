"""Base mixin for dashboard widgets."""


class DashboardMixin:
    """Mixin for widgets that render controlled content.

    Suppresses Textual's default link processing. Paths and branch names are
    rendered verbatim.
    """

    auto_links = False
